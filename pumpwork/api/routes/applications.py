from fastapi import APIRouter, Depends

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
    get_policy,
    get_profile_repo,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import ApplicationListResponse, StatusUpdateRequest
from pumpwork.components.applications import (
    ApplicationOutput,
    GetApplicationInput,
    ListFreelancerApplicationsInput,
    UpdateApplicationStatusInput,
    run_accept_application,
    run_get_application,
    run_list_freelancer_applications,
    run_reject_application,
    run_update_application_status,
    run_withdraw_application,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.entities import JobApplication
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


def _unwrap(result: ApplicationOutput) -> JobApplication:
    if not result.success or result.application is None:
        raise_for_error(result.error)
    return result.application


@router.get("/freelancer/{freelancer_id}", response_model=ApplicationListResponse)
def list_freelancer_applications(
    freelancer_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ApplicationListResponse:
    result = run_list_freelancer_applications(
        ListFreelancerApplicationsInput(actor=identity, freelancer_id=freelancer_id),
        repo,
        jobs,
        profiles,
        policy,
    )
    if not result.success:
        raise_for_error(result.error)
    return ApplicationListResponse(items=result.applications, total=result.total)


@router.get("/{application_id}", response_model=JobApplication)
def get_application(
    application_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> JobApplication:
    inp = GetApplicationInput(actor=identity, application_id=application_id)
    return _unwrap(run_get_application(inp, repo, jobs, profiles, policy))


@router.post("/{application_id}/accept", response_model=JobApplication)
def accept_application(
    application_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> JobApplication:
    inp = GetApplicationInput(actor=identity, application_id=application_id)
    return _unwrap(run_accept_application(inp, repo, jobs, policy, clock))


@router.post("/{application_id}/reject", response_model=JobApplication)
def reject_application(
    application_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> JobApplication:
    inp = GetApplicationInput(actor=identity, application_id=application_id)
    return _unwrap(run_reject_application(inp, repo, jobs, policy, clock))


@router.post("/{application_id}/withdraw", response_model=JobApplication)
def withdraw_application(
    application_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> JobApplication:
    inp = GetApplicationInput(actor=identity, application_id=application_id)
    return _unwrap(run_withdraw_application(inp, repo, jobs, policy, clock))


@router.patch("/{application_id}/status", response_model=JobApplication)
def update_application_status(
    application_id: str,
    req: StatusUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteApplicationRepo = Depends(get_application_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> JobApplication:
    inp = UpdateApplicationStatusInput(
        actor=identity,
        application_id=application_id,
        status=req.status,  # type: ignore[arg-type]
    )
    return _unwrap(run_update_application_status(inp, repo, jobs, policy, clock))
