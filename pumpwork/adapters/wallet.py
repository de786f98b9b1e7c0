"""
Wallet provider adapter.

``DevWalletProvider`` stands in for the Phantom browser extension: it holds
one account, remembers whether the app is trusted, and emits
``accountChanged`` and ``disconnect`` events to registered handlers.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pumpwork.domain.errors import WalletError

logger = logging.getLogger(__name__)

USER_REJECTED = 4001

WALLET_EVENTS = ("connect", "accountChanged", "disconnect")


@dataclass(frozen=True)
class WalletConnection:
    public_key: str


class DevWalletProvider:
    def __init__(
        self,
        address: str | None = None,
        trusted: bool = False,
        available: bool = True,
    ):
        self.address = address
        self.trusted = trusted
        self.is_available = available
        self.is_connected = False
        self.approve_requests = True
        self.failure: str | None = None
        self._handlers: dict[str, list[Callable[..., Any]]] = {e: [] for e in WALLET_EVENTS}

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown wallet event: {event}")
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Callable[..., Any]) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def _emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(*args)
            except Exception:
                logger.exception("Wallet %s handler failed", event)

    async def connect(self, only_if_trusted: bool = False) -> WalletConnection:
        if self.failure:
            raise WalletError(self.failure)
        if self.address is None:
            raise WalletError("No account available")
        if only_if_trusted and not self.trusted:
            raise WalletError("User rejected the request.", code=USER_REJECTED)
        if not only_if_trusted and not self.approve_requests:
            raise WalletError("User rejected the request.", code=USER_REJECTED)

        self.trusted = True
        self.is_connected = True
        self._emit("connect", self.address)
        return WalletConnection(public_key=self.address)

    async def disconnect(self) -> None:
        was_connected = self.is_connected
        self.is_connected = False
        if was_connected:
            self._emit("disconnect")

    def switch_account(self, address: str | None) -> None:
        """Simulate the user picking another account in the extension."""
        self.address = address
        if self.is_connected:
            self._emit("accountChanged", address)
