"""Core helpers."""

from cartify.core.utils import generate_id, new_token, utc_now

__all__ = ["generate_id", "new_token", "utc_now"]
