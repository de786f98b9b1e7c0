"""
Token-gated access.

Derives the effective marketplace role of the current identity from the
stored profile role and the token balance. The stored role only holds while
the balance meets its threshold:

- 1K tokens: client (can hire freelancers)
- 10K tokens: freelancer (can offer services)
- 50K tokens: boosted freelancer (premium visibility)

Admins keep client and freelancer access regardless of balance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pumpwork.domain.entities import AuthUser, Profile
from pumpwork.rules.models import TokenThresholdRules


@dataclass(frozen=True)
class TokenThresholds:
    client: float = 1_000
    freelancer: float = 10_000
    boosted_freelancer: float = 50_000

    @classmethod
    def from_rules(cls, rules: TokenThresholdRules) -> TokenThresholds:
        return cls(
            client=rules.client,
            freelancer=rules.freelancer,
            boosted_freelancer=rules.boosted_freelancer,
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "CLIENT": self.client,
            "FREELANCER": self.freelancer,
            "BOOSTED_FREELANCER": self.boosted_freelancer,
        }


@dataclass(frozen=True)
class Identity:
    """Merged view of hosted session, profile row and wallet."""

    is_authenticated: bool
    is_client: bool
    is_freelancer: bool
    is_admin: bool
    can_be_client: bool
    can_be_freelancer: bool
    is_boosted_freelancer: bool
    effective_role: str | None
    stored_role: str | None
    is_wallet_connected: bool
    wallet_address: str | None
    token_balance: float
    live_token_balance: float
    token_thresholds: TokenThresholds = field(default_factory=TokenThresholds)
    user_id: str | None = None
    profile_id: str | None = None

    def has_min_tokens(self, required: float) -> bool:
        return self.token_balance >= required

    def can_access_role(self, role: str) -> bool:
        if role == "client":
            return self.can_be_client
        if role == "freelancer":
            return self.can_be_freelancer
        if role == "boosted":
            return self.is_boosted_freelancer
        if role == "admin":
            return self.is_admin
        return False

    @property
    def roles(self) -> list[str]:
        """Roles usable for permission checks."""
        if self.is_admin:
            return ["admin"]
        return [self.effective_role] if self.effective_role else []

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_authenticated": self.is_authenticated,
            "is_client": self.is_client,
            "is_freelancer": self.is_freelancer,
            "is_admin": self.is_admin,
            "can_be_client": self.can_be_client,
            "can_be_freelancer": self.can_be_freelancer,
            "is_boosted_freelancer": self.is_boosted_freelancer,
            "effective_role": self.effective_role,
            "stored_role": self.stored_role,
            "is_wallet_connected": self.is_wallet_connected,
            "wallet_address": self.wallet_address,
            "token_balance": self.token_balance,
            "live_token_balance": self.live_token_balance,
            "token_thresholds": self.token_thresholds.as_dict(),
            "user_id": self.user_id,
            "profile_id": self.profile_id,
        }


def resolve_balance(live_balance: float, profile: Profile | None) -> float:
    if live_balance > 0:
        return live_balance
    if profile is not None and profile.token_balance:
        return profile.token_balance
    return 0


def resolve_effective_role(
    stored_role: str | None, can_be_client: bool, can_be_freelancer: bool
) -> str | None:
    if stored_role == "freelancer" and not can_be_freelancer:
        return "client" if can_be_client else None
    if stored_role == "client" and not can_be_client:
        return None
    return stored_role


def compute_identity(
    user: AuthUser | None,
    profile: Profile | None,
    local_wallet_address: str | None = None,
    live_token_balance: float = 0,
    thresholds: TokenThresholds | None = None,
) -> Identity:
    thresholds = thresholds or TokenThresholds()
    token_balance = resolve_balance(live_token_balance, profile)

    can_be_client = token_balance >= thresholds.client
    can_be_freelancer = token_balance >= thresholds.freelancer
    is_boosted = token_balance >= thresholds.boosted_freelancer

    stored_role = profile.user_type if profile is not None else None
    effective_role = resolve_effective_role(stored_role, can_be_client, can_be_freelancer)
    is_admin = stored_role == "admin"

    wallet_address = local_wallet_address or (profile.wallet_address if profile else None)

    return Identity(
        is_authenticated=user is not None or profile is not None,
        is_client=effective_role == "client" or is_admin,
        is_freelancer=effective_role == "freelancer" or is_admin,
        is_admin=is_admin,
        can_be_client=can_be_client,
        can_be_freelancer=can_be_freelancer,
        is_boosted_freelancer=is_boosted,
        effective_role=effective_role,
        stored_role=stored_role,
        is_wallet_connected=bool(wallet_address),
        wallet_address=wallet_address or None,
        token_balance=token_balance,
        live_token_balance=live_token_balance,
        token_thresholds=thresholds,
        user_id=str(user.id) if user else None,
        profile_id=str(profile.id) if profile else None,
    )
