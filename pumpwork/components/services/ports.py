"""
Services component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from pumpwork.domain.entities import Profile, ServicePost


class ServiceRepoPort(Protocol):
    def save(self, service: ServicePost) -> ServicePost: ...
    def get_by_id(self, service_id: UUID | str) -> ServicePost | None: ...

    def list(
        self,
        statuses: list[str],
        category: str | None = None,
        skills: list[str] | None = None,
        price_min: float | None = None,
        price_max: float | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> list[ServicePost]: ...

    def list_by_freelancer(self, freelancer_id: UUID | str) -> list[ServicePost]: ...


class ProfileLookupPort(Protocol):
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
