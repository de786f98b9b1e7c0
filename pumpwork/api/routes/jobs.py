"""Job post routes, including the applications posted against a job."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from pumpwork.adapters.clock import SystemClock
from pumpwork.adapters.sqlite.repos import (
    SQLiteApplicationRepo,
    SQLiteJobPostRepo,
    SQLiteProfileRepo,
)
from pumpwork.api.deps import (
    get_application_repo,
    get_clock,
    get_current_identity,
    get_job_repo,
    get_optional_identity,
    get_policy,
    get_profile_repo,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import (
    ApplicationCreateRequest,
    ApplicationListResponse,
    ExistsResponse,
    JobCreateRequest,
    JobListResponse,
    JobUpdateRequest,
)
from pumpwork.components.applications import (
    CheckApplicationInput,
    CreateApplicationInput,
    ListJobApplicationsInput,
    run_check_application,
    run_create_application,
    run_list_job_applications,
)
from pumpwork.components.jobs import (
    CreateJobInput,
    DeleteJobInput,
    GetJobInput,
    ListClientJobsInput,
    ListJobsInput,
    UpdateJobInput,
    run_create_job,
    run_delete_job,
    run_get_job,
    run_list_client_jobs,
    run_list_jobs,
    run_update_job,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.entities import JobApplication, JobPost, JobStatus
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


@router.get("", response_model=JobListResponse)
def list_jobs(
    status: JobStatus | None = None,
    category: str | None = None,
    skills: Annotated[list[str] | None, Query()] = None,
    budget_min: float | None = None,
    budget_max: float | None = None,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    repo: SQLiteJobPostRepo = Depends(get_job_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> JobListResponse:
    """Browse jobs. Without a status filter only open and in-progress jobs are shown."""
    result = run_list_jobs(
        ListJobsInput(
            status=status,
            category=category,
            skills=skills,
            budget_min=budget_min,
            budget_max=budget_max,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        ),
        repo,
        profiles,
    )
    return JobListResponse(items=result.jobs, total=result.total)


@router.get("/client/{client_id}", response_model=JobListResponse)
def list_client_jobs(
    client_id: str,
    repo: SQLiteJobPostRepo = Depends(get_job_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> JobListResponse:
    result = run_list_client_jobs(ListClientJobsInput(client_id), repo, profiles)
    return JobListResponse(items=result.jobs, total=result.total)


@router.post("", response_model=JobPost, status_code=201)
def create_job(
    req: JobCreateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> JobPost:
    result = run_create_job(CreateJobInput(actor=identity, **req.model_dump()), repo, policy, clock)
    if not result.success or result.job is None:
        raise_for_error(result.error)
    return result.job


@router.get("/{job_id}", response_model=JobPost)
def get_job(
    job_id: str,
    repo: SQLiteJobPostRepo = Depends(get_job_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> JobPost:
    result = run_get_job(GetJobInput(job_id), repo, profiles)
    if not result.success or result.job is None:
        raise_for_error(result.error)
    return result.job


@router.patch("/{job_id}", response_model=JobPost)
def update_job(
    job_id: str,
    req: JobUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> JobPost:
    inp = UpdateJobInput(actor=identity, job_id=job_id, **req.model_dump(exclude_unset=True))
    result = run_update_job(inp, repo, policy, clock)
    if not result.success or result.job is None:
        raise_for_error(result.error)
    return result.job


@router.delete("/{job_id}")
def delete_job(
    job_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> dict[str, str]:
    result = run_delete_job(DeleteJobInput(actor=identity, job_id=job_id), repo, policy)
    if not result.success:
        raise_for_error(result.error)
    return {"status": "deleted"}


# --- Applications ---


@router.get("/{job_id}/applications", response_model=ApplicationListResponse)
def list_job_applications(
    job_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ApplicationListResponse:
    """Applications on a job (job owner only)."""
    result = run_list_job_applications(
        ListJobApplicationsInput(actor=identity, job_post_id=job_id), repo, jobs, profiles, policy
    )
    if not result.success:
        raise_for_error(result.error)
    return ApplicationListResponse(items=result.applications, total=result.total)


@router.post("/{job_id}/applications", response_model=JobApplication, status_code=201)
def apply_to_job(
    job_id: str,
    req: ApplicationCreateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> JobApplication:
    result = run_create_application(
        CreateApplicationInput(
            actor=identity,
            job_post_id=job_id,
            cover_letter=req.cover_letter,
            proposed_rate=req.proposed_rate,
        ),
        repo,
        jobs,
        policy,
        clock,
    )
    if not result.success or result.application is None:
        raise_for_error(result.error)
    return result.application


@router.get("/{job_id}/applications/check", response_model=ExistsResponse)
def check_application(
    job_id: str,
    freelancer_id: str | None = None,
    identity: Identity | None = Depends(get_optional_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
) -> ExistsResponse:
    """Whether a freelancer (default: the caller) already applied to the job."""
    freelancer_id = freelancer_id or (identity.profile_id if identity else None)
    if freelancer_id is None:
        raise HTTPException(status_code=400, detail="freelancer_id is required")
    result = run_check_application(CheckApplicationInput(job_id, freelancer_id), repo)
    return ExistsResponse(exists=result.exists, id=result.application_id, status=result.status)
