from datetime import datetime
from typing import Protocol
from uuid import UUID

from pumpwork.domain.entities import AuthSession, AuthUser, Profile


class AuthUserRepoPort(Protocol):
    def get_by_email(self, email: str) -> AuthUser | None: ...
    def get_by_id(self, user_id: object) -> AuthUser | None: ...
    def save(self, user: AuthUser) -> AuthUser: ...
    def delete(self, user_id: object) -> bool: ...


class ProfileRepoPort(Protocol):
    def get_by_id(self, profile_id: object) -> Profile | None: ...
    def save(self, profile: Profile) -> Profile: ...


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def create_token(self, user_id: object, ttl_minutes: int) -> str: ...
    def create_refresh_token(self) -> str: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class SessionStorePort(Protocol):
    """Port for session storage - removes global state from component."""

    def get(self, token: str) -> AuthSession | None:
        """Get session by access token."""
        ...

    def get_by_refresh(self, refresh_token: str) -> AuthSession | None:
        """Get session by its refresh token."""
        ...

    def save(self, session: AuthSession) -> None: ...

    def delete(self, token: str) -> None:
        """Delete session by access token."""
        ...

    def delete_by_user(self, user_id: UUID) -> int:
        """Delete all sessions for a user. Returns count deleted."""
        ...
