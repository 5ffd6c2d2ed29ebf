"""
Security wiring.

Builds every access-control component from one immutable
`SecurityConfig`, so nothing reads settings behind your back:

    security = Security(store, settings.security_config())
    app.state.security = security
    app.add_middleware(AccessControlMiddleware, security=security)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from cartify.auth.context import AuthenticatedSubject
from cartify.auth.csrf import CsrfProtection
from cartify.auth.errors import PrincipalNotFound
from cartify.auth.handlers import (
    AccessDeniedHandler,
    LoginEntryPoint,
    LogoutHandler,
    SuccessHandler,
)
from cartify.auth.policies import Rule, RuleMatcher, default_rules
from cartify.auth.provider import AuthenticationProvider
from cartify.auth.remember_me import RememberMeTokenManager
from cartify.auth.resolver import PrincipalResolver
from cartify.auth.session import SessionStore
from cartify.auth.store import CredentialStore
from cartify.config import SecurityConfig

logger = logging.getLogger(__name__)


class Security:
    """All access-control collaborators for one application."""

    def __init__(
        self,
        store: CredentialStore,
        config: SecurityConfig,
        rules: Iterable[Rule] | None = None,
        sessions: SessionStore | None = None,
    ):
        self.config = config
        self.store = store
        self.sessions = sessions if sessions is not None else SessionStore(config.session_timeout_seconds)

        self.resolver = PrincipalResolver(store)
        self.provider = AuthenticationProvider(self.resolver, config)
        self.remember_me = RememberMeTokenManager(self.resolver, config)
        self.csrf = CsrfProtection(config)

        # Login, logout and denied pages are reachable whatever the table says
        self.matcher = RuleMatcher(
            default_rules() if rules is None else rules,
            always_public=[config.login_path, config.logout_path, config.denied_path],
        )
        for rule, pattern, earlier in self.matcher.shadowed_rules():
            logger.warning(
                "Authorization rule %s is unreachable: '%s' is already matched by %s",
                rule, pattern, earlier,
            )

        self.success_handler = SuccessHandler(config)
        self.entry_point = LoginEntryPoint(config)
        self.denied_handler = AccessDeniedHandler(config, self.matcher)
        self.logout_handler = LogoutHandler(config, self.sessions, self.remember_me, self.csrf)

    def restore_session(self, session_id: str | None) -> AuthenticatedSubject | None:
        """
        Subject for a session cookie, checked against the store.

        Admin edits take effect on the next request: a deactivated or
        deleted account loses its session, a role change is applied.
        """
        subject = self.sessions.get(session_id)
        if subject is None:
            return None

        try:
            candidate = self.resolver.resolve(subject.email)
        except PrincipalNotFound:
            candidate = None

        if candidate is None or not candidate.enabled:
            logger.info("Session ended: account no longer active")
            self.sessions.invalidate(session_id)
            return None

        if candidate.authorities != subject.authorities:
            subject = replace(subject, authorities=candidate.authorities)
            self.sessions.update(session_id, subject)

        return subject
