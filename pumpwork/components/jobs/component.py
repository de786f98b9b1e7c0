"""
Jobs component - job posts published by clients.

Shell Layer - permission checks, validation and repo calls.
"""

from __future__ import annotations

import logging
from typing import Any

from pumpwork.domain.entities import JobPost, attach_summaries
from pumpwork.domain.errors import forbidden, invalid, not_found
from pumpwork.domain.policy import PolicyEngine
from pumpwork.domain.validation import clean_skills, validate_post_fields

from .models import (
    DEFAULT_STATUSES,
    CreateJobInput,
    DeleteJobInput,
    GetJobInput,
    JobListOutput,
    JobOutput,
    ListClientJobsInput,
    ListJobsInput,
    UpdateJobInput,
)
from .ports import JobRepoPort, ProfileLookupPort, TimePort

logger = logging.getLogger(__name__)

SORTABLE = frozenset({"created_at", "updated_at", "budget", "title", "deadline"})


def _with_client(jobs: list[JobPost], profiles: ProfileLookupPort) -> list[JobPost]:
    return attach_summaries(jobs, profiles.get_many, client="client_id")


def run_list_jobs(
    inp: ListJobsInput, repo: JobRepoPort, profiles: ProfileLookupPort
) -> JobListOutput:
    statuses = [inp.status] if inp.status else list(DEFAULT_STATUSES)
    sort_by = inp.sort_by if inp.sort_by in SORTABLE else "created_at"
    jobs = repo.list(
        statuses=statuses,
        category=inp.category,
        skills=inp.skills,
        budget_min=inp.budget_min,
        budget_max=inp.budget_max,
        search=inp.search.strip() if inp.search else None,
        sort_by=sort_by,
        sort_order="asc" if inp.sort_order == "asc" else "desc",
    )
    return JobListOutput(jobs=_with_client(jobs, profiles), total=len(jobs))


def run_get_job(inp: GetJobInput, repo: JobRepoPort, profiles: ProfileLookupPort) -> JobOutput:
    job = repo.get_by_id(inp.job_id)
    if job is None:
        return JobOutput(job=None, success=False, error=not_found("Job", inp.job_id))
    return JobOutput(job=_with_client([job], profiles)[0], success=True)


def run_list_client_jobs(
    inp: ListClientJobsInput, repo: JobRepoPort, profiles: ProfileLookupPort
) -> JobListOutput:
    jobs = repo.list_by_client(inp.client_id)
    return JobListOutput(jobs=_with_client(jobs, profiles), total=len(jobs))


def run_create_job(
    inp: CreateJobInput, repo: JobRepoPort, policy: PolicyEngine, time: TimePort
) -> JobOutput:
    """Post a job as the acting client. New jobs always start open."""
    actor = inp.actor
    if actor is None or actor.profile_id is None or not policy.check_permission(
        actor, "jobs:create"
    ):
        return JobOutput(job=None, success=False, error=forbidden("Client access required"))

    error = validate_post_fields(inp.title, inp.description, inp.budget, "budget")
    if error:
        return JobOutput(job=None, success=False, error=error)

    now = time.now_utc()
    job = JobPost(
        client_id=actor.profile_id,
        title=inp.title.strip(),
        description=inp.description.strip(),
        category=inp.category,
        skills=clean_skills(inp.skills) or [],
        budget=inp.budget,
        budget_type=inp.budget_type,
        deadline=inp.deadline,
        status="open",
        created_at=now,
        updated_at=now,
    )
    repo.save(job)
    logger.info("Job %s posted by %s", job.id, job.client_id)
    return JobOutput(job=job, success=True)


def run_update_job(
    inp: UpdateJobInput, repo: JobRepoPort, policy: PolicyEngine, time: TimePort
) -> JobOutput:
    job = repo.get_by_id(inp.job_id)
    if job is None:
        return JobOutput(job=None, success=False, error=not_found("Job", inp.job_id))
    if not policy.can_manage(inp.actor, "jobs:manage", job.client_id):
        return JobOutput(job=None, success=False, error=forbidden())

    error = validate_post_fields(inp.title, inp.description, inp.budget, "budget")
    if error:
        return JobOutput(job=None, success=False, error=error)

    updates: dict[str, Any] = {}
    if inp.title is not None:
        updates["title"] = inp.title.strip()
    if inp.description is not None:
        updates["description"] = inp.description.strip()
    if inp.category is not None:
        updates["category"] = inp.category
    if inp.skills is not None:
        updates["skills"] = clean_skills(inp.skills)
    if inp.budget is not None:
        updates["budget"] = inp.budget
    if inp.budget_type is not None:
        updates["budget_type"] = inp.budget_type
    if inp.deadline is not None:
        updates["deadline"] = inp.deadline
    if inp.status is not None:
        updates["status"] = inp.status

    if not updates:
        return JobOutput(job=None, success=False, error=invalid("Nothing to update"))

    updates["updated_at"] = time.now_utc()
    updated = JobPost.model_validate({**job.model_dump(), **updates})
    repo.save(updated)
    return JobOutput(job=updated, success=True)


def run_delete_job(inp: DeleteJobInput, repo: JobRepoPort, policy: PolicyEngine) -> JobOutput:
    job = repo.get_by_id(inp.job_id)
    if job is None:
        return JobOutput(job=None, success=False, error=not_found("Job", inp.job_id))
    if not policy.can_manage(inp.actor, "jobs:manage", job.client_id):
        return JobOutput(job=None, success=False, error=forbidden())

    repo.delete(job.id)
    logger.info("Job %s deleted", job.id)
    return JobOutput(job=job, success=True)
