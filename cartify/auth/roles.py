"""
Roles and authorities.

A role is what an admin assigns to a user. An authority is the
"ROLE_"-prefixed string the rule matcher checks for.
"""

from __future__ import annotations

from enum import Enum


AUTHORITY_PREFIX = "ROLE_"


class Role(str, Enum):
    """Platform-wide role of a user."""

    ADMIN = "ADMIN"          # Back-office access
    CUSTOMER = "CUSTOMER"    # Storefront, cart and own orders


def authority_for(role: Role | str) -> str:
    """
    Map a role to its authority string.

    Usage:
        authority_for(Role.ADMIN)  # "ROLE_ADMIN"
    """
    role = Role(role)
    return f"{AUTHORITY_PREFIX}{role.value}"


def authorities_for(role: Role | str) -> frozenset[str]:
    """Authority set granted to a principal holding `role`."""
    return frozenset({authority_for(role)})
