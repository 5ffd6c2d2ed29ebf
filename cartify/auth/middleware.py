"""Access-control middleware.

Runs in front of every route:
1. Restore the subject from the session cookie (re-checked against the store)
2. Refuse unsafe methods without a matching CSRF token
3. Otherwise try the remember-me cookie (and open a session if it works)
4. Ask the rule matcher about the path
5. Deny -> login redirect (anonymous) or denied handler (logged in)
   Allow -> continue with `request.state.subject` set
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from cartify.auth.context import describe
from cartify.auth.handlers import set_session_cookie
from cartify.auth.policies import Deny

if TYPE_CHECKING:
    from cartify.auth.security import Security

logger = logging.getLogger(__name__)


def sets_cookie(response: Response, name: str) -> bool:
    """Whether the response already writes cookie `name`."""
    prefix = f"{name}="
    return any(
        value.decode("latin-1").startswith(prefix)
        for key, value in response.raw_headers
        if key.lower() == b"set-cookie"
    )


class AccessControlMiddleware(BaseHTTPMiddleware):
    """Authenticates and authorizes each request."""

    def __init__(self, app, security: Security):
        super().__init__(app)
        self.security = security

    async def dispatch(self, request: Request, call_next) -> Response:
        security = self.security
        config = security.config
        path = request.url.path

        subject = security.restore_session(request.cookies.get(config.session_cookie_name))
        remembered_session: str | None = None
        reject_cookie = False

        csrf_token, new_csrf_token = security.csrf.current_token(request)
        request.state.csrf_token = csrf_token
        request.state.subject = subject
        request.state.session_id = None

        if not await security.csrf.verify(request):
            logger.info("CSRF token missing or wrong: user='%s' %s '%s'", describe(subject), request.method, path)
            response = security.denied_handler.handle(subject, path)
            if new_csrf_token:
                security.csrf.set_cookie(response, csrf_token)
            return response

        if subject is None:
            token = request.cookies.get(config.remember_me_cookie_name)
            if token:
                subject = security.remember_me.auto_login(token)
                if subject is not None:
                    remembered_session = security.sessions.create(
                        subject, origin=security.remember_me.fingerprint(token)
                    )
                    logger.debug("Remember-me login for '%s'", subject.name)
                else:
                    reject_cookie = True

        request.state.subject = subject
        request.state.session_id = remembered_session

        decision = security.matcher.authorize(path, subject)

        if isinstance(decision, Deny):
            if decision.needs_login:
                response = security.entry_point.commence(path)
            else:
                response = security.denied_handler.handle(subject, path)
        else:
            response = await call_next(request)

        if remembered_session:
            if sets_cookie(response, config.session_cookie_name):
                # Login or logout replaced the session during this request
                security.sessions.invalidate(remembered_session)
            else:
                set_session_cookie(response, config, remembered_session)

        if reject_cookie and not sets_cookie(response, config.remember_me_cookie_name):
            security.remember_me.clear_cookie(response)

        if new_csrf_token and not sets_cookie(response, config.csrf_cookie_name):
            security.csrf.set_cookie(response, csrf_token)

        return response
