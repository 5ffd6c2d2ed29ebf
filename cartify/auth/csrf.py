# =============================================================================
# CSRF Protection
# =============================================================================
#
# Double-submit token:
#   - Every browser gets a random token in the CSRF cookie (HttpOnly)
#   - Pages render the same token into a hidden form field
#     (`request.state.csrf_token`)
#   - POST / PUT / PATCH / DELETE must echo it back, as the form field or
#     the X-CSRF-Token header; anything else is refused
#   - The token is replaced at login and logout
#
# A forged cross-site form cannot read the cookie, so it cannot supply
# the matching field.
#
# =============================================================================

from __future__ import annotations

import re
import secrets

from starlette.requests import Request
from starlette.responses import Response

from cartify.config import SecurityConfig
from cartify.core.utils import new_token

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{32,128}$")


class CsrfProtection:
    """Issues and checks CSRF tokens."""

    def __init__(self, config: SecurityConfig):
        self.config = config

    @property
    def cookie_name(self) -> str:
        return self.config.csrf_cookie_name

    @property
    def field_name(self) -> str:
        return self.config.csrf_field_name

    def new_token(self) -> str:
        return new_token()

    @staticmethod
    def well_formed(token: str | None) -> bool:
        return isinstance(token, str) and TOKEN_PATTERN.match(token) is not None

    def current_token(self, request: Request) -> tuple[str, bool]:
        """
        The browser's token, or a fresh one.

        Returns: (token, is_new)
        """
        token = request.cookies.get(self.cookie_name)
        if self.well_formed(token):
            return token, False
        return self.new_token(), True

    async def submitted_token(self, request: Request) -> str | None:
        """The token sent with an unsafe request, from header or form."""
        header = request.headers.get(self.config.csrf_header_name)
        if header:
            return header

        content_type = request.headers.get("content-type", "")
        if not content_type.startswith(FORM_CONTENT_TYPES):
            return None

        # Cache the body so the route can parse the form again
        await request.body()
        form = await request.form()
        value = form.get(self.field_name)
        return value if isinstance(value, str) else None

    async def verify(self, request: Request) -> bool:
        """Whether the request may proceed."""
        if request.method in SAFE_METHODS:
            return True

        expected = request.cookies.get(self.cookie_name)
        if not self.well_formed(expected):
            return False

        submitted = await self.submitted_token(request)
        if not submitted:
            return False
        return secrets.compare_digest(
            expected.encode("utf-8"),
            submitted.encode("utf-8", "replace"),
        )

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            path="/",
            httponly=True,
            secure=self.config.secure_cookies,
            samesite="lax",
        )

    def rotate(self, request: Request, response: Response) -> str:
        """Replace the token (login, logout)."""
        token = self.new_token()
        request.state.csrf_token = token
        self.set_cookie(response, token)
        return token
