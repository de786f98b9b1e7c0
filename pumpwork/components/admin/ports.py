"""
Admin component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID

from pumpwork.domain.entities import Profile


class GroupCountPort(Protocol):
    def count_by(self, column: str) -> dict[str, int]:
        """Row counts keyed by the column's value."""
        ...

    def recent(self, limit: int = 10) -> list[Any]: ...


class CountPort(Protocol):
    def count(self, **equals: Any) -> int: ...


class ReviewStatsPort(Protocol):
    def count(self, **equals: Any) -> int: ...
    def average_rating(self) -> float: ...


class ProfileDirectoryPort(Protocol):
    def count_by(self, column: str) -> dict[str, int]: ...
    def recent(self, limit: int = 10) -> list[Profile]: ...
    def list_all(self) -> list[Profile]: ...
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]: ...


@dataclass(frozen=True)
class PlatformSources:
    """Every table the dashboard reads from."""

    profiles: ProfileDirectoryPort
    jobs: GroupCountPort
    services: GroupCountPort
    applications: GroupCountPort
    contracts: GroupCountPort
    messages: CountPort
    reviews: ReviewStatsPort
