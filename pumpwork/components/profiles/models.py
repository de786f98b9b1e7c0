"""
Profiles component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Profile
from pumpwork.domain.errors import OperationError

# --- Input Models ---


@dataclass(frozen=True)
class GetProfileInput:
    profile_id: UUID | str


@dataclass(frozen=True)
class GetProfileByWalletInput:
    wallet_address: str


@dataclass(frozen=True)
class ListProfilesInput:
    """Filters for browsing profiles."""

    user_type: str | None = None
    skills: list[str] | None = None
    min_rating: float | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


@dataclass(frozen=True)
class UpdateProfileInput:
    actor: Identity | None
    profile_id: UUID | str
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RecordBalanceInput:
    """Store a freshly fetched on-chain balance on the profile."""

    actor: Identity | None
    profile_id: UUID | str
    token_balance: float


@dataclass(frozen=True)
class ProfileStatsInput:
    profile_id: UUID | str


# --- Output Models ---


@dataclass(frozen=True)
class ProfileStats:
    jobs_posted: int = 0
    contracts_as_client: int = 0
    contracts_as_freelancer: int = 0
    completed_jobs: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "jobsPosted": self.jobs_posted,
            "contractsAsClient": self.contracts_as_client,
            "contractsAsFreelancer": self.contracts_as_freelancer,
            "completedJobs": self.completed_jobs,
        }


@dataclass(frozen=True)
class ProfileOutput:
    profile: Profile | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class ProfileListOutput:
    profiles: list[Profile]
    total: int


@dataclass(frozen=True)
class ProfileStatsOutput:
    stats: ProfileStats | None
    success: bool
    error: OperationError | None = None
