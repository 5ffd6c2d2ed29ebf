# =============================================================================
# Remember-Me Tokens
# =============================================================================
#
# A returning browser can be logged in without a password if it presents
# a cookie issued at an earlier login with "remember me" ticked.
#
# The cookie value is a signed JWT carrying the email and an expiry:
#   - Issued:       after a successful login with the remember-me flag
#   - Validating:   on an anonymous request that carries the cookie
#   - Rejected:     bad signature, wrong type, expired, or the principal
#                   is gone / disabled -> request continues as anonymous
#   - Revalidated:  a fresh subject is installed for the request
#   - Cleared:      on logout
#
# This is a single shared-secret token, not a per-device rotating series,
# so a stolen cookie stays usable until it expires.
#
# =============================================================================

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta

import jwt
from starlette.responses import Response

from cartify.auth.context import AuthenticatedSubject
from cartify.auth.errors import PrincipalNotFound, TokenInvalidOrExpired
from cartify.auth.resolver import PrincipalResolver
from cartify.config import SecurityConfig
from cartify.core.utils import utc_now

logger = logging.getLogger(__name__)

TOKEN_TYPE = "remember-me"


class RememberMeTokenManager:
    """Issues and validates remember-me cookies."""

    def __init__(self, resolver: PrincipalResolver, config: SecurityConfig):
        self.resolver = resolver
        self.config = config

    @property
    def cookie_name(self) -> str:
        return self.config.remember_me_cookie_name

    @property
    def validity(self) -> timedelta:
        return timedelta(seconds=self.config.remember_me_validity_seconds)

    # =========================================================================
    # Token Creation / Validation
    # =========================================================================

    def issue(self, email: str, now: datetime | None = None) -> str:
        """Create a token for `email`, valid for the configured window."""
        now = now or utc_now()
        expire = now + self.validity

        payload = {
            "sub": email,
            "exp": int(expire.timestamp()),
            "type": TOKEN_TYPE,
        }

        return jwt.encode(
            payload,
            self.config.remember_me_key,
            algorithm=self.config.remember_me_algorithm,
        )

    def validate(self, token: str, now: datetime | None = None) -> str:
        """
        Check signature and expiry of a token.

        Returns:
            The email the token was issued for

        Raises:
            TokenInvalidOrExpired: for any problem with the token
        """
        now = now or utc_now()
        try:
            payload = jwt.decode(
                token,
                self.config.remember_me_key,
                algorithms=[self.config.remember_me_algorithm],
                # Expiry is checked below against `now`
                options={"verify_exp": False, "require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as e:
            raise TokenInvalidOrExpired(f"Invalid token: {type(e).__name__}") from None
        except (TypeError, ValueError):
            raise TokenInvalidOrExpired("Invalid token: malformed") from None

        if payload.get("type") != TOKEN_TYPE:
            raise TokenInvalidOrExpired(f"Expected {TOKEN_TYPE} token")

        expires = payload["exp"]
        if not isinstance(expires, (int, float)):
            raise TokenInvalidOrExpired("Invalid token: bad expiry")
        if now.timestamp() >= expires:
            raise TokenInvalidOrExpired("Token has expired")

        email = payload["sub"]
        if not isinstance(email, str) or not email:
            raise TokenInvalidOrExpired("Invalid token: bad subject")
        return email

    def auto_login(self, token: str | None, now: datetime | None = None) -> AuthenticatedSubject | None:
        """
        Log a returning browser in from its cookie.

        Never raises: any failure leaves the request anonymous.
        """
        if not token:
            return None

        try:
            email = self.validate(token, now=now)
        except TokenInvalidOrExpired as e:
            logger.debug("Remember-me cookie rejected: %s", e)
            return None

        try:
            candidate = self.resolver.resolve(email)
        except PrincipalNotFound:
            logger.debug("Remember-me cookie rejected: principal no longer exists")
            return None

        if not candidate.enabled:
            logger.debug("Remember-me cookie rejected: account disabled")
            return None

        return AuthenticatedSubject.from_candidate(candidate, remembered=True)

    @staticmethod
    def fingerprint(token: str) -> str:
        """Digest identifying a token without keeping the token itself."""
        return hashlib.sha256(token.encode("utf-8", "replace")).hexdigest()

    # =========================================================================
    # Cookies
    # =========================================================================

    def set_cookie(self, response: Response, email: str, now: datetime | None = None) -> None:
        """Attach a freshly issued token to the response."""
        response.set_cookie(
            key=self.cookie_name,
            value=self.issue(email, now=now),
            max_age=self.config.remember_me_validity_seconds,
            path="/",
            httponly=True,
            secure=self.config.secure_cookies,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.config.secure_cookies,
            samesite="lax",
        )
