"""
Principal resolver.

Turns a stored principal into an `AuthenticationCandidate`: the
authority set is derived from the role and `enabled` from the active
flag. Used both by password login and by remember-me auto-login.
"""

from __future__ import annotations

from cartify.auth.context import AuthenticationCandidate
from cartify.auth.errors import PrincipalNotFound
from cartify.auth.roles import authorities_for
from cartify.auth.store import CredentialStore


class PrincipalResolver:
    """Loads authentication candidates by email."""

    def __init__(self, store: CredentialStore):
        self.store = store

    def resolve(self, email: str) -> AuthenticationCandidate:
        """
        Resolve a login email.

        Raises:
            PrincipalNotFound: nothing is stored under `email`. The message
                carries the email, so callers must not show it to users.
        """
        principal = self.store.find_by_email(email)
        if principal is None:
            raise PrincipalNotFound(email)

        return AuthenticationCandidate(
            email=principal.email,
            password_hash=principal.password_hash,
            authorities=authorities_for(principal.role),
            enabled=principal.active,
        )
