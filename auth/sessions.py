"""
auth/sessions.py -- In-memory token session map.

Usage:
    sessions = SessionStore(expire_seconds=3600)
    token = sessions.issue("asha@x.com")
    sessions.resolve(token)    # -> "asha@x.com", or None once expired/revoked
    sessions.revoke(token)

The store only knows registry keys (case-folded emails), never User objects,
so the directory stays the single owner of user records. It is not
thread-safe on its own -- AuthDirectory calls it under its lock.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from auth.models import Session
from auth.tokens import digest_token, generate_session_token


class SessionStore:
    def __init__(self, expire_seconds: int, clock: Callable[[], float] = time.time) -> None:
        self.expire_seconds = expire_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def issue(self, user_email: str) -> str:
        """Create a session for user_email and return the raw token (shown once)."""
        now = self._clock()
        token = generate_session_token()
        self._sessions[digest_token(token)] = Session(
            user_email=user_email,
            issued_at=now,
            expires_at=now + self.expire_seconds,
        )
        return token

    def resolve(self, token: str) -> str | None:
        """Return the owner's registry key for a live token, else None.

        Expired entries are dropped on lookup.
        """
        key = digest_token(token)
        session = self._sessions.get(key)
        if session is None:
            return None
        if session.is_expired(self._clock()):
            del self._sessions[key]
            return None
        return session.user_email

    def revoke(self, token: str) -> bool:
        """Drop a session. Returns True if the token was known."""
        return self._sessions.pop(digest_token(token), None) is not None

    def purge_expired(self) -> int:
        """Delete all expired sessions. Returns number of sessions removed."""
        now = self._clock()
        expired = [k for k, s in self._sessions.items() if s.is_expired(now)]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
