"""
Access control - who may see which page.

Design principles:
1. One ordered URL table decides every request (first match wins)
2. Explicit Allow / Deny results, no exceptions as control flow
3. All secrets and cookie names come in through `SecurityConfig`
4. Failed logins all look the same to the browser
"""

from cartify.auth.context import AuthenticatedSubject, AuthenticationCandidate
from cartify.auth.errors import (
    AccessError,
    AccountDisabled,
    AuthenticationError,
    AuthError,
    BadCredentials,
    Forbidden,
    PrincipalNotFound,
    RuleConfigError,
    TokenInvalidOrExpired,
    Unauthorized,
)
from cartify.auth.roles import Role, authority_for
from cartify.auth.passwords import hash_password, verify_password
from cartify.auth.store import CredentialStore, InMemoryCredentialStore, Principal
from cartify.auth.resolver import PrincipalResolver
from cartify.auth.provider import AuthenticationProvider
from cartify.auth.remember_me import RememberMeTokenManager
from cartify.auth.policies import (
    Allow,
    Deny,
    Requirement,
    Rule,
    RuleMatcher,
    default_rules,
    load_rules,
)
from cartify.auth.session import SessionStore
from cartify.auth.csrf import CsrfProtection
from cartify.auth.handlers import (
    AccessDeniedHandler,
    LoginEntryPoint,
    LogoutHandler,
    SuccessHandler,
)
from cartify.auth.security import Security
from cartify.auth.middleware import AccessControlMiddleware
from cartify.auth.routes import router as auth_router

__all__ = [
    # Wiring
    "Security",
    "AccessControlMiddleware",
    "auth_router",
    # Subjects
    "AuthenticatedSubject",
    "AuthenticationCandidate",
    "Role",
    "authority_for",
    # Credentials
    "CredentialStore",
    "InMemoryCredentialStore",
    "Principal",
    "PrincipalResolver",
    "AuthenticationProvider",
    "hash_password",
    "verify_password",
    # Remember-me / sessions
    "RememberMeTokenManager",
    "SessionStore",
    "CsrfProtection",
    # Authorization
    "Allow",
    "Deny",
    "Requirement",
    "Rule",
    "RuleMatcher",
    "default_rules",
    "load_rules",
    # Handlers
    "AccessDeniedHandler",
    "LoginEntryPoint",
    "LogoutHandler",
    "SuccessHandler",
    # Errors
    "AuthError",
    "AuthenticationError",
    "PrincipalNotFound",
    "BadCredentials",
    "AccountDisabled",
    "TokenInvalidOrExpired",
    "AccessError",
    "Unauthorized",
    "Forbidden",
    "RuleConfigError",
]
