"""
Applications component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from pumpwork.domain.entities import JobApplication, JobPost, Profile


class ApplicationRepoPort(Protocol):
    def save(self, application: JobApplication) -> JobApplication: ...
    def get_by_id(self, application_id: UUID | str) -> JobApplication | None: ...

    def get_by_job_and_freelancer(
        self, job_post_id: UUID | str, freelancer_id: UUID | str
    ) -> JobApplication | None: ...

    def list_by_job(self, job_post_id: UUID | str) -> list[JobApplication]: ...
    def list_by_freelancer(self, freelancer_id: UUID | str) -> list[JobApplication]: ...


class JobLookupPort(Protocol):
    def get_by_id(self, job_id: UUID | str) -> JobPost | None: ...


class ProfileLookupPort(Protocol):
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
