from fastapi import APIRouter, Depends

from pumpwork.adapters.clock import SystemClock
from pumpwork.adapters.sqlite.repos import (
    SQLiteProfileRepo,
    SQLiteServicePostRepo,
    SQLiteServiceRequestRepo,
)
from pumpwork.api.deps import (
    get_clock,
    get_current_identity,
    get_policy,
    get_profile_repo,
    get_service_repo,
    get_service_request_repo,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import ServiceRequestListResponse, StatusUpdateRequest
from pumpwork.components.service_requests import (
    GetServiceRequestInput,
    ListPartyRequestsInput,
    ServiceRequestListOutput,
    ServiceRequestOutput,
    UpdateServiceRequestStatusInput,
    run_accept_service_request,
    run_get_service_request,
    run_list_client_requests,
    run_list_freelancer_requests,
    run_reject_service_request,
    run_update_service_request_status,
    run_withdraw_service_request,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.entities import ServiceRequest
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


def _unwrap(result: ServiceRequestOutput) -> ServiceRequest:
    if not result.success or result.request is None:
        raise_for_error(result.error)
    return result.request


def _listing(result: ServiceRequestListOutput) -> ServiceRequestListResponse:
    if not result.success:
        raise_for_error(result.error)
    return ServiceRequestListResponse(items=result.requests, total=result.total)


@router.get("/freelancer/{freelancer_id}", response_model=ServiceRequestListResponse)
def list_received_requests(
    freelancer_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    services: SQLiteServicePostRepo = Depends(get_service_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ServiceRequestListResponse:
    inp = ListPartyRequestsInput(actor=identity, party_id=freelancer_id)
    return _listing(run_list_freelancer_requests(inp, repo, services, profiles, policy))


@router.get("/client/{client_id}", response_model=ServiceRequestListResponse)
def list_sent_requests(
    client_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    services: SQLiteServicePostRepo = Depends(get_service_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ServiceRequestListResponse:
    inp = ListPartyRequestsInput(actor=identity, party_id=client_id)
    return _listing(run_list_client_requests(inp, repo, services, profiles, policy))


@router.get("/{request_id}", response_model=ServiceRequest)
def get_service_request(
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    services: SQLiteServicePostRepo = Depends(get_service_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ServiceRequest:
    inp = GetServiceRequestInput(actor=identity, request_id=request_id)
    return _unwrap(run_get_service_request(inp, repo, services, profiles, policy))


@router.post("/{request_id}/accept", response_model=ServiceRequest)
def accept_service_request(
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> ServiceRequest:
    inp = GetServiceRequestInput(actor=identity, request_id=request_id)
    return _unwrap(run_accept_service_request(inp, repo, policy, clock))


@router.post("/{request_id}/reject", response_model=ServiceRequest)
def reject_service_request(
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> ServiceRequest:
    inp = GetServiceRequestInput(actor=identity, request_id=request_id)
    return _unwrap(run_reject_service_request(inp, repo, policy, clock))


@router.post("/{request_id}/withdraw", response_model=ServiceRequest)
def withdraw_service_request(
    request_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> ServiceRequest:
    """Client takes back a pending request."""
    inp = GetServiceRequestInput(actor=identity, request_id=request_id)
    return _unwrap(run_withdraw_service_request(inp, repo, policy, clock))


@router.patch("/{request_id}/status", response_model=ServiceRequest)
def update_service_request_status(
    request_id: str,
    req: StatusUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> ServiceRequest:
    inp = UpdateServiceRequestStatusInput(
        actor=identity, request_id=request_id, status=req.status  # type: ignore[arg-type]
    )
    return _unwrap(run_update_service_request_status(inp, repo, policy, clock))
