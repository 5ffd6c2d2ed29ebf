"""
Server-side sessions.

The browser only holds an opaque id; the authenticated subject stays
on the server. In-memory here - swap for Redis in a multi-process
deployment.

Sessions end on logout, or after `timeout_seconds` without a request.
Expired entries are dropped when looked up and swept whenever a new
session is created.

A session opened from a remember-me cookie records where it came from
(`origin`, a digest of the token). Presenting the same cookie again
reuses that session instead of opening another one.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from cartify.auth.context import AuthenticatedSubject
from cartify.core.utils import new_token


@dataclass
class SessionEntry:
    subject: AuthenticatedSubject
    last_seen: float
    origin: str | None = None


class SessionStore:
    """Maps opaque session ids to authenticated subjects."""

    def __init__(
        self,
        timeout_seconds: int = 30 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if timeout_seconds < 1:
            raise ValueError("Session timeout must be at least one second")
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self._sessions: dict[str, SessionEntry] = {}
        self._by_origin: dict[str, str] = {}

    def create(self, subject: AuthenticatedSubject, origin: str | None = None) -> str:
        """Start a session (or reuse the live one for `origin`) and return its id."""
        self.purge_expired()
        now = self.clock()

        if origin is not None:
            existing = self._by_origin.get(origin)
            entry = self._sessions.get(existing) if existing else None
            if entry is not None:
                entry.subject = subject
                entry.last_seen = now
                return existing

        session_id = new_token()
        self._sessions[session_id] = SessionEntry(subject, now, origin)
        if origin is not None:
            self._by_origin[origin] = session_id
        return session_id

    def get(self, session_id: str | None) -> AuthenticatedSubject | None:
        """Subject for a live session; touching it restarts the idle timer."""
        if not session_id:
            return None
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        now = self.clock()
        if self._expired(entry, now):
            self.invalidate(session_id)
            return None

        entry.last_seen = now
        return entry.subject

    def update(self, session_id: str, subject: AuthenticatedSubject) -> None:
        entry = self._sessions.get(session_id)
        if entry is not None:
            entry.subject = subject

    def invalidate(self, session_id: str | None) -> bool:
        """Destroy a session. Returns True if it existed."""
        if not session_id:
            return False
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            return False
        if entry.origin is not None and self._by_origin.get(entry.origin) == session_id:
            del self._by_origin[entry.origin]
        return True

    def purge_expired(self) -> int:
        """Drop every idle session. Returns how many were removed."""
        now = self.clock()
        expired = [sid for sid, entry in self._sessions.items() if self._expired(entry, now)]
        for session_id in expired:
            self.invalidate(session_id)
        return len(expired)

    def _expired(self, entry: SessionEntry, now: float) -> bool:
        return now - entry.last_seen >= self.timeout_seconds

    def __len__(self) -> int:
        return len(self._sessions)
