"""
Auth errors.

Authentication failures are raised by the provider and collapsed by the
login route into one generic outcome. Access errors are never raised:
the rule matcher returns them inside a `Deny` result.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for the access-control core."""
    pass


# =============================================================================
# Authentication
# =============================================================================


class AuthenticationError(AuthError):
    """Login failed. Subtypes must look identical to the end user."""
    pass


class PrincipalNotFound(AuthenticationError):
    """No principal is stored under the submitted email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User not found with email: {email}")


class BadCredentials(AuthenticationError):
    """Unknown principal or wrong password."""

    def __init__(self, message: str = "Bad credentials"):
        super().__init__(message)


class AccountDisabled(AuthenticationError):
    """The principal exists but is not active."""

    def __init__(self, message: str = "User is disabled"):
        super().__init__(message)


class TokenInvalidOrExpired(AuthError):
    """Remember-me token failed signature, format or expiry checks."""
    pass


# =============================================================================
# Authorization
# =============================================================================


class AccessError(AuthError):
    """A request was refused by the rule matcher."""

    def __init__(self, path: str, required: str):
        self.path = path
        self.required = required
        super().__init__(f"Access to '{path}' requires {required}")


class Unauthorized(AccessError):
    """Anonymous request to a path that needs a logged-in user."""
    pass


class Forbidden(AccessError):
    """Authenticated user lacks the role the path requires."""
    pass


class RuleConfigError(AuthError):
    """The authorization rule table is malformed."""
    pass
