"""In-memory session store adapter.

Implements SessionStorePort for the auth component. Sessions are keyed by
access token, with a secondary index from refresh token to access token.
"""

import threading
from uuid import UUID

from pumpwork.domain.entities import AuthSession


class InMemorySessionStore:
    """In-memory session storage - suitable for single-process deployments."""

    def __init__(self) -> None:
        self._sessions: dict[str, AuthSession] = {}
        self._refresh_index: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, token: str) -> AuthSession | None:
        """Get session by access token."""
        with self._lock:
            return self._sessions.get(token)

    def get_by_refresh(self, refresh_token: str) -> AuthSession | None:
        with self._lock:
            access = self._refresh_index.get(refresh_token)
            return self._sessions.get(access) if access else None

    def save(self, session: AuthSession) -> None:
        with self._lock:
            self._sessions[session.access_token] = session
            self._refresh_index[session.refresh_token] = session.access_token

    def delete(self, token: str) -> None:
        """Delete session by access token."""
        with self._lock:
            session = self._sessions.pop(token, None)
            if session is not None:
                self._refresh_index.pop(session.refresh_token, None)

    def delete_by_user(self, user_id: UUID) -> int:
        """Delete all sessions for a user. Returns count deleted."""
        with self._lock:
            tokens = [k for k, v in self._sessions.items() if str(v.user.id) == str(user_id)]
            for token in tokens:
                session = self._sessions.pop(token)
                self._refresh_index.pop(session.refresh_token, None)
            return len(tokens)

    def clear(self) -> None:
        """Clear all sessions - useful for testing."""
        with self._lock:
            self._sessions.clear()
            self._refresh_index.clear()
