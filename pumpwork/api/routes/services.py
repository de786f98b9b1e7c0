"""Service listing routes, including requests sent to a service."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from pumpwork.adapters.clock import SystemClock
from pumpwork.adapters.sqlite.repos import (
    SQLiteProfileRepo,
    SQLiteServicePostRepo,
    SQLiteServiceRequestRepo,
)
from pumpwork.api.deps import (
    get_clock,
    get_current_identity,
    get_optional_identity,
    get_policy,
    get_profile_repo,
    get_service_repo,
    get_service_request_repo,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import (
    ExistsResponse,
    ServiceCreateRequest,
    ServiceListResponse,
    ServiceRequestCreateRequest,
    ServiceRequestListResponse,
    ServiceUpdateRequest,
)
from pumpwork.components.service_requests import (
    CheckServiceRequestInput,
    CreateServiceRequestInput,
    ListServiceRequestsInput,
    run_check_service_request,
    run_create_service_request,
    run_list_service_requests,
)
from pumpwork.components.services import (
    CreateServiceInput,
    DeleteServiceInput,
    GetServiceInput,
    ListFreelancerServicesInput,
    ListServicesInput,
    UpdateServiceInput,
    run_create_service,
    run_delete_service,
    run_get_service,
    run_list_freelancer_services,
    run_list_services,
    run_update_service,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.entities import ServicePost, ServiceRequest, ServiceStatus
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


@router.get("", response_model=ServiceListResponse)
def list_services(
    status: ServiceStatus | None = None,
    category: str | None = None,
    skills: Annotated[list[str] | None, Query()] = None,
    price_min: float | None = None,
    price_max: float | None = None,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    repo: SQLiteServicePostRepo = Depends(get_service_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> ServiceListResponse:
    result = run_list_services(
        ListServicesInput(
            status=status,
            category=category,
            skills=skills,
            price_min=price_min,
            price_max=price_max,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        ),
        repo,
        profiles,
    )
    return ServiceListResponse(items=result.services, total=result.total)


@router.get("/freelancer/{freelancer_id}", response_model=ServiceListResponse)
def list_freelancer_services(
    freelancer_id: str,
    repo: SQLiteServicePostRepo = Depends(get_service_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> ServiceListResponse:
    result = run_list_freelancer_services(
        ListFreelancerServicesInput(freelancer_id), repo, profiles
    )
    return ServiceListResponse(items=result.services, total=result.total)


@router.post("", response_model=ServicePost, status_code=201)
def create_service(
    req: ServiceCreateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServicePostRepo = Depends(get_service_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> ServicePost:
    result = run_create_service(
        CreateServiceInput(actor=identity, **req.model_dump()), repo, policy, clock
    )
    if not result.success or result.service is None:
        raise_for_error(result.error)
    return result.service


@router.get("/{service_id}", response_model=ServicePost)
def get_service(
    service_id: str,
    repo: SQLiteServicePostRepo = Depends(get_service_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> ServicePost:
    result = run_get_service(GetServiceInput(service_id), repo, profiles)
    if not result.success or result.service is None:
        raise_for_error(result.error)
    return result.service


@router.patch("/{service_id}", response_model=ServicePost)
def update_service(
    service_id: str,
    req: ServiceUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServicePostRepo = Depends(get_service_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> ServicePost:
    inp = UpdateServiceInput(
        actor=identity, service_id=service_id, **req.model_dump(exclude_unset=True)
    )
    result = run_update_service(inp, repo, policy, clock)
    if not result.success or result.service is None:
        raise_for_error(result.error)
    return result.service


@router.delete("/{service_id}")
def delete_service(
    service_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServicePostRepo = Depends(get_service_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, str]:
    """Soft delete: the service is marked deleted and drops out of listings."""
    result = run_delete_service(
        DeleteServiceInput(actor=identity, service_id=service_id), repo, policy, clock
    )
    if not result.success:
        raise_for_error(result.error)
    return {"status": "deleted"}


# --- Requests ---


@router.get("/{service_id}/requests", response_model=ServiceRequestListResponse)
def list_service_requests(
    service_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    services: SQLiteServicePostRepo = Depends(get_service_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ServiceRequestListResponse:
    result = run_list_service_requests(
        ListServiceRequestsInput(actor=identity, service_post_id=service_id),
        repo,
        services,
        profiles,
        policy,
    )
    if not result.success:
        raise_for_error(result.error)
    return ServiceRequestListResponse(items=result.requests, total=result.total)


@router.post("/{service_id}/requests", response_model=ServiceRequest, status_code=201)
def request_service(
    service_id: str,
    req: ServiceRequestCreateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
    services: SQLiteServicePostRepo = Depends(get_service_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> ServiceRequest:
    result = run_create_service_request(
        CreateServiceRequestInput(
            actor=identity, service_post_id=service_id, message=req.message, budget=req.budget
        ),
        repo,
        services,
        policy,
        clock,
    )
    if not result.success or result.request is None:
        raise_for_error(result.error)
    return result.request


@router.get("/{service_id}/requests/check", response_model=ExistsResponse)
def check_service_request(
    service_id: str,
    client_id: str | None = None,
    identity: Identity | None = Depends(get_optional_identity),
    repo: SQLiteServiceRequestRepo = Depends(get_service_request_repo),
) -> ExistsResponse:
    client_id = client_id or (identity.profile_id if identity else None)
    if client_id is None:
        raise HTTPException(status_code=400, detail="client_id is required")
    result = run_check_service_request(CheckServiceRequestInput(service_id, client_id), repo)
    return ExistsResponse(exists=result.exists, id=result.request_id, status=result.status)
