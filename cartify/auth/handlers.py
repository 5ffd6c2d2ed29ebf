"""
Outcome handlers - where the browser goes after an auth decision.

- Success: admins land on the dashboard, everyone else on the home page
- Entry point: anonymous callers are sent to the login page
- Denied: logged-in callers without the right role get a warning in the
  log and the friendly 403 page
- Logout: session and cookies are torn down, back to login
"""

from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from cartify.auth.context import AuthenticatedSubject, describe
from cartify.auth.csrf import CsrfProtection
from cartify.auth.errors import RuleConfigError
from cartify.auth.policies import RuleMatcher
from cartify.auth.remember_me import RememberMeTokenManager
from cartify.auth.session import SessionStore
from cartify.config import SecurityConfig

logger = logging.getLogger(__name__)


def redirect(url: str) -> RedirectResponse:
    """303 so a POST is followed by a GET."""
    return RedirectResponse(url=url, status_code=303)


def set_session_cookie(response: Response, config: SecurityConfig, session_id: str) -> None:
    response.set_cookie(
        key=config.session_cookie_name,
        value=session_id,
        path="/",
        httponly=True,
        secure=config.secure_cookies,
        samesite="lax",
    )


def clear_session_cookie(response: Response, config: SecurityConfig) -> None:
    response.delete_cookie(
        key=config.session_cookie_name,
        path="/",
        httponly=True,
        secure=config.secure_cookies,
        samesite="lax",
    )


class SuccessHandler:
    """Role-based landing page after login."""

    def __init__(self, config: SecurityConfig):
        self.config = config

    def destination(self, subject: AuthenticatedSubject) -> str:
        if subject.is_admin:
            return self.config.admin_home_path
        return self.config.customer_home_path

    def on_success(self, subject: AuthenticatedSubject) -> RedirectResponse:
        return redirect(self.destination(subject))


class LoginEntryPoint:
    """Sends anonymous callers to the login page."""

    def __init__(self, config: SecurityConfig):
        self.config = config

    def commence(self, path: str) -> RedirectResponse:
        logger.debug("Authentication required for '%s'", path)
        return redirect(self.config.login_path)


class AccessDeniedHandler:
    """
    Logs and redirects refused requests.

    The denied page must itself be public, otherwise the redirect
    would be refused again.
    """

    def __init__(self, config: SecurityConfig, matcher: RuleMatcher | None = None):
        self.config = config
        if matcher is not None and not matcher.is_public(config.denied_path):
            raise RuleConfigError(
                f"Access-denied page '{config.denied_path}' must be public"
            )

    def handle(self, subject: AuthenticatedSubject | None, path: str) -> RedirectResponse:
        logger.warning("Access denied: user='%s' attempted to access '%s'", describe(subject), path)
        return redirect(self.config.denied_path)


class LogoutHandler:
    """Invalidates the session, wipes both auth cookies and replaces the CSRF token."""

    def __init__(
        self,
        config: SecurityConfig,
        sessions: SessionStore,
        remember_me: RememberMeTokenManager,
        csrf: CsrfProtection,
    ):
        self.config = config
        self.sessions = sessions
        self.remember_me = remember_me
        self.csrf = csrf

    def logout(self, request: Request) -> RedirectResponse:
        self.sessions.invalidate(request.cookies.get(self.config.session_cookie_name))
        # Session opened by a remember-me login earlier in this request
        self.sessions.invalidate(getattr(request.state, "session_id", None))
        request.state.subject = None

        response = redirect(self.config.logout_success_path)
        clear_session_cookie(response, self.config)
        self.remember_me.clear_cookie(response)
        self.csrf.rotate(request, response)
        return response
