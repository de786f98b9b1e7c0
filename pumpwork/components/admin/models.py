"""
Admin component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Contract, JobPost, Profile
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class AdminInput:
    actor: Identity | None


@dataclass(frozen=True)
class RecentActivityInput:
    actor: Identity | None
    limit: int = 10


@dataclass(frozen=True)
class PlatformStats:
    """Counts across the marketplace. Status buckets missing from the data are 0."""

    users_by_type: dict[str, int]
    jobs_by_status: dict[str, int]
    services_by_status: dict[str, int]
    applications_by_status: dict[str, int]
    contracts_by_status: dict[str, int]
    message_count: int
    review_count: int
    average_rating: float

    def to_dict(self) -> dict[str, Any]:
        def bucket(counts: dict[str, int], *keys: str) -> dict[str, int]:
            out = {"total": sum(counts.values())}
            out.update({k: counts.get(k, 0) for k in keys})
            return out

        users = bucket(self.users_by_type)
        users.update(
            clients=self.users_by_type.get("client", 0),
            freelancers=self.users_by_type.get("freelancer", 0),
            admins=self.users_by_type.get("admin", 0),
        )
        return {
            "users": users,
            "jobs": bucket(self.jobs_by_status, "open", "in_progress", "completed", "cancelled"),
            "services": bucket(self.services_by_status, "active", "paused"),
            "applications": bucket(
                self.applications_by_status, "pending", "accepted", "rejected"
            ),
            "contracts": bucket(self.contracts_by_status, "active", "completed", "cancelled"),
            "messages": {"total": self.message_count},
            "reviews": {"total": self.review_count, "averageRating": self.average_rating},
        }


@dataclass(frozen=True)
class PlatformStatsOutput:
    stats: PlatformStats | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class RecentActivityOutput:
    recent_users: list[Profile]
    recent_jobs: list[JobPost]
    recent_contracts: list[Contract]
    success: bool = True
    error: OperationError | None = None


@dataclass(frozen=True)
class UserListOutput:
    users: list[Profile]
    total: int
    success: bool = True
    error: OperationError | None = None
