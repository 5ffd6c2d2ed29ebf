"""
Authentication provider - email + password login.

Flow:
1. Resolve the candidate by email
2. Refuse disabled accounts
3. Verify the password against the stored hash

Unknown emails and wrong passwords both surface as `BadCredentials`,
so a caller cannot tell which one happened.
"""

from __future__ import annotations

import logging

from cartify.auth.context import AuthenticatedSubject
from cartify.auth.errors import AccountDisabled, BadCredentials, PrincipalNotFound
from cartify.auth.passwords import hash_password, verify_password
from cartify.auth.resolver import PrincipalResolver
from cartify.config import SecurityConfig

logger = logging.getLogger(__name__)


class AuthenticationProvider:
    """Verifies submitted credentials and produces a subject."""

    def __init__(self, resolver: PrincipalResolver, config: SecurityConfig):
        self.resolver = resolver
        self.config = config
        self._dummy_hash: str | None = None

    def authenticate(self, email: str, password: str) -> AuthenticatedSubject:
        """
        Authenticate by email and password.

        Raises:
            BadCredentials: unknown email or wrong password
            AccountDisabled: the account exists but is inactive
        """
        try:
            candidate = self.resolver.resolve(email)
        except PrincipalNotFound as e:
            logger.debug("Authentication failed: %s", e)
            # Same hashing cost as a real check
            verify_password(password, self._timing_hash())
            raise BadCredentials() from None

        if not candidate.enabled:
            logger.info("Authentication refused for disabled account")
            raise AccountDisabled()

        if not verify_password(password, candidate.password_hash):
            logger.info("Authentication failed: bad credentials")
            raise BadCredentials()

        return AuthenticatedSubject.from_candidate(candidate)

    def _timing_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password(
                "cartify-unknown-user",
                iterations=self.config.password_hash_iterations,
            )
        return self._dummy_hash
