"""
Small helpers shared across Cartify: ids, opaque tokens and the clock.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timezone


def generate_id(prefix: str = "") -> str:
    """
    Short unique id for stored records, e.g. "user_1f0c9a7be2d4".
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def new_token(nbytes: int = 32) -> str:
    """URL-safe random value for cookies (session ids, CSRF tokens)."""
    return secrets.token_urlsafe(nbytes)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
