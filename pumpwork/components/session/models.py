from dataclasses import dataclass
from typing import Any

from pumpwork.domain.entities import AuthUser, Profile


class ProfileFetchTimeout(TimeoutError):
    pass


class ReconcilerError(Exception):
    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass
class ReconcilerState:
    user: AuthUser | None = None
    profile: Profile | None = None
    is_loading: bool = True
    is_profile_loading: bool = False
    auth_error: Exception | None = None
    local_wallet_address: str | None = None
    is_wallet_connecting: bool = False
    live_token_balance: float = 0


@dataclass
class AuthResult:
    data: Any = None
    error: Exception | None = None


@dataclass
class WalletConnectResult:
    address: str | None = None
    profile: Profile | None = None
    profile_exists: bool = False
    token_balance: float = 0
    error: Exception | None = None


@dataclass
class WalletSignInData:
    profile: Profile | None
    address: str
    is_new_user: bool
