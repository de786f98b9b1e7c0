"""
Jobs component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from pumpwork.domain.entities import JobPost, Profile


class JobRepoPort(Protocol):
    def save(self, job: JobPost) -> JobPost: ...
    def get_by_id(self, job_id: UUID | str) -> JobPost | None: ...
    def delete(self, job_id: UUID | str) -> bool: ...

    def list(
        self,
        statuses: list[str],
        category: str | None = None,
        skills: list[str] | None = None,
        budget_min: float | None = None,
        budget_max: float | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> list[JobPost]: ...

    def list_by_client(self, client_id: UUID | str) -> list[JobPost]: ...


class ProfileLookupPort(Protocol):
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]:
        """Profiles keyed by string id; unknown ids are skipped."""
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
