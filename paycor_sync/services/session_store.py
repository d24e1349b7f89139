"""Process-local store for OAuth sessions keyed by browser session."""

from __future__ import annotations

import asyncio
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from paycor_sync.models.oauth import OAuthSession, OAuthToken


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """
    Keep OAuth state and tokens for each browser session in memory.

    All access goes through one lock and callers only ever receive copies.
    Sessions idle for longer than ``ttl_seconds`` are pruned.
    """

    def __init__(
        self,
        ttl_seconds: int = 86400,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._sessions: Dict[str, OAuthSession] = {}
        self._lock = asyncio.Lock()
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self) -> OAuthSession:
        async with self._lock:
            self._prune()
            session_id = secrets.token_urlsafe(32)
            now = self._clock()
            session = OAuthSession(session_id=session_id, created_at=now, updated_at=now)
            self._sessions[session_id] = session
            return session.model_copy(deep=True)

    async def get(self, session_id: str) -> Optional[OAuthSession]:
        async with self._lock:
            self._prune()
            session = self._sessions.get(session_id)
            if session is None:
                return None
            self._touch(session)
            return session.model_copy(deep=True)

    async def set_pending_state(self, session_id: str, state: str) -> None:
        """Remember the state issued for the session's latest login attempt."""
        async with self._lock:
            session = self._require(session_id)
            session.pending_state = state
            self._touch(session)

    async def consume_pending_state(self, session_id: str, state: str) -> bool:
        """
        Check ``state`` against the session's pending state.

        A matching state is cleared so it cannot be replayed.
        """
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not session.pending_state or not state:
                return False
            if not hmac.compare_digest(
                session.pending_state.encode("utf-8"), state.encode("utf-8")
            ):
                return False
            session.pending_state = None
            self._touch(session)
            return True

    async def store_token(self, session_id: str, token: OAuthToken) -> None:
        async with self._lock:
            session = self._require(session_id)
            session.token = token.model_copy()
            self._touch(session)

    async def get_token(self, session_id: str) -> Optional[OAuthToken]:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.token is None:
                return None
            return session.token.model_copy()

    async def clear_token(self, session_id: str) -> None:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.token = None

    def _touch(self, session: OAuthSession) -> None:
        session.updated_at = self._clock()

    def _prune(self) -> None:
        threshold = self._clock() - timedelta(seconds=self._ttl)
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.updated_at < threshold
        ]
        for session_id in expired:
            del self._sessions[session_id]

    def _require(self, session_id: str) -> OAuthSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Unknown session {session_id!r}")
        return session


__all__ = ["SessionStore"]
