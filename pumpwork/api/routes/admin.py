"""Admin dashboard routes."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from pumpwork.api.deps import get_current_identity, get_platform_sources, get_policy
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import ProfileListResponse, ProfileResponse, RecentActivityResponse
from pumpwork.components.admin import (
    AdminInput,
    PlatformSources,
    RecentActivityInput,
    run_list_all_users,
    run_platform_stats,
    run_recent_activity,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


@router.get("/stats")
def platform_stats(
    identity: Identity = Depends(get_current_identity),
    sources: PlatformSources = Depends(get_platform_sources),
    policy: PolicyEngine = Depends(get_policy),
) -> dict[str, Any]:
    """Platform-wide counts grouped by type and status."""
    result = run_platform_stats(AdminInput(actor=identity), sources, policy)
    if not result.success or result.stats is None:
        raise_for_error(result.error)
    return result.stats.to_dict()


@router.get("/activity", response_model=RecentActivityResponse)
def recent_activity(
    limit: int = Query(default=10, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    sources: PlatformSources = Depends(get_platform_sources),
    policy: PolicyEngine = Depends(get_policy),
) -> RecentActivityResponse:
    result = run_recent_activity(
        RecentActivityInput(actor=identity, limit=limit), sources, policy
    )
    if not result.success:
        raise_for_error(result.error)
    return RecentActivityResponse(
        recent_users=[ProfileResponse.model_validate(p) for p in result.recent_users],
        recent_jobs=result.recent_jobs,
        recent_contracts=result.recent_contracts,
    )


@router.get("/users", response_model=ProfileListResponse)
def list_all_users(
    identity: Identity = Depends(get_current_identity),
    sources: PlatformSources = Depends(get_platform_sources),
    policy: PolicyEngine = Depends(get_policy),
) -> ProfileListResponse:
    result = run_list_all_users(AdminInput(actor=identity), sources, policy)
    if not result.success:
        raise_for_error(result.error)
    return ProfileListResponse(
        items=[ProfileResponse.model_validate(p) for p in result.users], total=result.total
    )
