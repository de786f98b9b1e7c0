"""
Session component - current identity reconciliation.

Merges the hosted-auth session, the profile row and the connected wallet.
"""

from ._impl import Throttle, is_transient, with_retry
from .component import EMAIL_NOT_CONFIRMED_MESSAGE, SessionReconciler
from .models import (
    AuthResult,
    ProfileFetchTimeout,
    ReconcilerError,
    ReconcilerState,
    WalletConnectResult,
    WalletSignInData,
)
from .ports import (
    AuthClientPort,
    BalanceSourcePort,
    ProfileSourcePort,
    RealtimePort,
    TimePort,
    WalletProviderPort,
)

__all__ = [
    "SessionReconciler",
    "EMAIL_NOT_CONFIRMED_MESSAGE",
    "Throttle",
    "is_transient",
    "with_retry",
    # Models
    "AuthResult",
    "ProfileFetchTimeout",
    "ReconcilerError",
    "ReconcilerState",
    "WalletConnectResult",
    "WalletSignInData",
    # Ports
    "AuthClientPort",
    "BalanceSourcePort",
    "ProfileSourcePort",
    "RealtimePort",
    "TimePort",
    "WalletProviderPort",
]
