"""
Applications component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import ApplicationStatus, JobApplication
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class ListJobApplicationsInput:
    actor: Identity | None
    job_post_id: UUID | str


@dataclass(frozen=True)
class ListFreelancerApplicationsInput:
    actor: Identity | None
    freelancer_id: UUID | str


@dataclass(frozen=True)
class CreateApplicationInput:
    actor: Identity | None
    job_post_id: UUID | str
    cover_letter: str = ""
    proposed_rate: float | None = None


@dataclass(frozen=True)
class UpdateApplicationStatusInput:
    actor: Identity | None
    application_id: UUID | str
    status: ApplicationStatus


@dataclass(frozen=True)
class GetApplicationInput:
    actor: Identity | None
    application_id: UUID | str


@dataclass(frozen=True)
class CheckApplicationInput:
    job_post_id: UUID | str
    freelancer_id: UUID | str


@dataclass(frozen=True)
class ApplicationOutput:
    application: JobApplication | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class ApplicationListOutput:
    applications: list[JobApplication]
    total: int
    success: bool = True
    error: OperationError | None = None


@dataclass(frozen=True)
class ApplicationCheckOutput:
    exists: bool
    application_id: UUID | None = None
    status: ApplicationStatus | None = None
