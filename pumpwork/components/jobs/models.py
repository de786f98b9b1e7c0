"""
Jobs component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import BudgetType, JobPost, JobStatus
from pumpwork.domain.errors import OperationError

DEFAULT_STATUSES: tuple[JobStatus, ...] = ("open", "in_progress")

# --- Input Models ---


@dataclass(frozen=True)
class ListJobsInput:
    """Browse filters. Without a status only open and in-progress jobs are listed."""

    status: JobStatus | None = None
    category: str | None = None
    skills: list[str] | None = None
    budget_min: float | None = None
    budget_max: float | None = None
    search: str | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


@dataclass(frozen=True)
class GetJobInput:
    job_id: UUID | str


@dataclass(frozen=True)
class ListClientJobsInput:
    client_id: UUID | str


@dataclass(frozen=True)
class CreateJobInput:
    actor: Identity | None
    title: str
    description: str
    category: str | None = None
    skills: list[str] = field(default_factory=list)
    budget: float = 0
    budget_type: BudgetType = "fixed"
    deadline: datetime | None = None


@dataclass(frozen=True)
class UpdateJobInput:
    actor: Identity | None
    job_id: UUID | str
    title: str | None = None
    description: str | None = None
    category: str | None = None
    skills: list[str] | None = None
    budget: float | None = None
    budget_type: BudgetType | None = None
    deadline: datetime | None = None
    status: JobStatus | None = None


@dataclass(frozen=True)
class DeleteJobInput:
    actor: Identity | None
    job_id: UUID | str


# --- Output Models ---


@dataclass(frozen=True)
class JobOutput:
    job: JobPost | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class JobListOutput:
    jobs: list[JobPost]
    total: int
