"""
Credential store.

The security core only ever asks one question of persistence: "who is
stored under this email?". Anything that can answer it implements
`CredentialStore`. The in-memory store below backs development and
tests; a database-backed store plugs in the same way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel, Field

from cartify.auth.roles import Role
from cartify.core.utils import generate_id, utc_now


# =============================================================================
# Models
# =============================================================================


class Principal(BaseModel):
    """User stored in the database."""
    id: str = Field(default_factory=lambda: generate_id("user"))
    full_name: str
    email: str
    password_hash: str
    role: Role = Role.CUSTOMER
    active: bool = True
    created_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Store Interface
# =============================================================================


class CredentialStore(ABC):
    """Lookup of principals by login email."""

    @abstractmethod
    def find_by_email(self, email: str) -> Principal | None:
        """Return the principal stored under `email`, or None."""
        pass


# =============================================================================
# In-Memory Store (Replace with DB in production)
# =============================================================================


class InMemoryCredentialStore(CredentialStore):
    """
    Dict-backed store.

    Emails are unique case-insensitively: they are normalised to lower
    case on write. Lookups match exactly what was stored.
    """

    def __init__(self):
        self._users: dict[str, Principal] = {}
        self._users_by_email: dict[str, str] = {}  # email -> user_id

    def add(self, principal: Principal) -> Principal:
        """Store a new principal."""
        email = principal.email.lower()
        if email in self._users_by_email:
            raise ValueError("Email already registered")

        principal = principal.model_copy(update={"email": email})
        self._users[principal.id] = principal
        self._users_by_email[email] = principal.id
        return principal

    def find_by_email(self, email: str) -> Principal | None:
        user_id = self._users_by_email.get(email)
        return self._users.get(user_id) if user_id else None

    def set_active(self, email: str, active: bool) -> bool:
        """Activate or deactivate an account (admin operation)."""
        principal = self.find_by_email(email)
        if not principal:
            return False
        self._users[principal.id] = principal.model_copy(update={"active": active})
        return True

    def set_role(self, email: str, role: Role) -> bool:
        """Change an account's role (admin operation)."""
        principal = self.find_by_email(email)
        if not principal:
            return False
        self._users[principal.id] = principal.model_copy(update={"role": Role(role)})
        return True

    def __len__(self) -> int:
        return len(self._users)
