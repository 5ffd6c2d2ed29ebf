# =============================================================================
# Password Hashing
# =============================================================================
#
# PBKDF2-SHA256 with a random per-password salt. Digests are
# self-describing so the iteration count can be raised later without
# invalidating stored hashes:
#
#   pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
#
# =============================================================================

from __future__ import annotations

import hashlib
import secrets

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 100_000


def _derive(password: str, salt: str, iterations: int) -> str:
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=iterations,
    )
    return hash_bytes.hex()


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """
    Hash a password.

    Returns: algorithm$iterations$salt$hash format string
    """
    if iterations < 1:
        raise ValueError("iterations must be positive")
    salt = secrets.token_hex(16)
    return f"{ALGORITHM}${iterations}${salt}${_derive(password, salt, iterations)}"


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Malformed or foreign digests simply fail to verify.
    """
    try:
        algorithm, iterations, salt, stored_hash = password_hash.split('$')
        if algorithm != ALGORITHM:
            return False
        rounds = int(iterations)
        if rounds < 1:
            return False
        return secrets.compare_digest(_derive(password, salt, rounds), stored_hash)
    except (ValueError, AttributeError, TypeError):
        return False

