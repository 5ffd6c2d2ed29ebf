"""
Auth context - who is making the request.

`AuthenticatedSubject` is the lightweight object installed on each
request once a user has logged in (by password or remember-me cookie).
Route handlers read it from `request.state.subject`; anonymous
requests carry `None`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cartify.auth.roles import Role, authority_for


@dataclass(frozen=True)
class AuthenticationCandidate:
    """
    A stored principal prepared for credential checks.

    Holds the password hash, so it never leaves the auth package.
    """

    email: str
    password_hash: str = field(repr=False)
    authorities: frozenset[str] = frozenset()
    enabled: bool = True


@dataclass(frozen=True)
class AuthenticatedSubject:
    """
    The logged-in user for the life of a session.

    Usage in routes:
        subject = request.state.subject
        if subject and subject.has_role(Role.ADMIN):
            ...
    """

    email: str
    authorities: frozenset[str] = frozenset()
    enabled: bool = True
    remembered: bool = False

    @property
    def name(self) -> str:
        return self.email

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities

    def has_role(self, role: Role | str) -> bool:
        """
        Check if the subject was granted a role.

        Usage:
            subject.has_role("ADMIN")
        """
        try:
            return self.has_authority(authority_for(role))
        except ValueError:
            return False

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)

    @classmethod
    def from_candidate(
        cls,
        candidate: AuthenticationCandidate,
        remembered: bool = False,
    ) -> AuthenticatedSubject:
        """Drop the credentials, keep the identity."""
        return cls(
            email=candidate.email,
            authorities=candidate.authorities,
            enabled=candidate.enabled,
            remembered=remembered,
        )


def describe(subject: AuthenticatedSubject | None) -> str:
    """Name used in log lines."""
    return subject.name if subject is not None else "anonymous"
