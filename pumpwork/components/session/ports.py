from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from pumpwork.domain.entities import AuthSession, Profile


class AuthSubscriptionPort(Protocol):
    def unsubscribe(self) -> None: ...


class AuthClientPort(Protocol):
    async def get_session(self) -> Any: ...
    async def refresh_session(self) -> Any: ...
    async def sign_up(
        self, email: str, password: str, data: dict[str, Any] | None = None
    ) -> Any: ...
    async def sign_in_with_password(self, email: str, password: str) -> Any: ...
    async def sign_out(self) -> Any: ...

    def on_auth_state_change(
        self, listener: Callable[[str, AuthSession | None], Any]
    ) -> AuthSubscriptionPort: ...


class ProfileSourcePort(Protocol):
    async def get_by_id(self, profile_id: UUID | str) -> Profile | None: ...
    async def get_by_wallet(self, wallet_address: str) -> Profile | None: ...
    async def update_fields(
        self, profile_id: UUID | str, updates: dict[str, Any]
    ) -> Profile | None: ...


class BalanceSourcePort(Protocol):
    async def fetch_balance(self, owner: str) -> float: ...


class WalletConnectionPort(Protocol):
    @property
    def public_key(self) -> str: ...


class WalletProviderPort(Protocol):
    @property
    def is_available(self) -> bool: ...

    async def connect(self, only_if_trusted: bool = False) -> WalletConnectionPort: ...
    async def disconnect(self) -> None: ...
    def on(self, event: str, handler: Callable[..., Any]) -> None: ...
    def off(self, event: str, handler: Callable[..., Any]) -> None: ...


class RealtimePort(Protocol):
    def channel(self, name: str) -> Any: ...
    def remove_channel(self, channel: Any) -> None: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
