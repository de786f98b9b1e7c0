"""Marketplace profile routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query

from pumpwork.adapters.solana_rpc import SolanaBalanceClient
from pumpwork.adapters.sqlite.repos import SQLiteContractRepo, SQLiteJobPostRepo, SQLiteProfileRepo
from pumpwork.api.deps import (
    get_balance_source,
    get_contract_repo,
    get_current_identity,
    get_job_repo,
    get_policy,
    get_profile_repo,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import ProfileListResponse, ProfileResponse, ProfileUpdateRequest
from pumpwork.components.profiles import (
    GetProfileByWalletInput,
    GetProfileInput,
    ListProfilesInput,
    ProfileStatsInput,
    RecordBalanceInput,
    UpdateProfileInput,
    run_get_profile,
    run_get_profile_by_wallet,
    run_list_profiles,
    run_profile_stats,
    run_record_balance,
    run_update_profile,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


@router.get("", response_model=ProfileListResponse)
def list_profiles(
    user_type: str | None = None,
    skills: Annotated[list[str] | None, Query()] = None,
    min_rating: float | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    repo: SQLiteProfileRepo = Depends(get_profile_repo),
) -> ProfileListResponse:
    result = run_list_profiles(
        ListProfilesInput(
            user_type=user_type,
            skills=skills,
            min_rating=min_rating,
            sort_by=sort_by,
            sort_order=sort_order,
        ),
        repo,
    )
    return ProfileListResponse(
        items=[ProfileResponse.model_validate(p) for p in result.profiles], total=result.total
    )


@router.post("/me/balance", response_model=ProfileResponse)
def refresh_my_balance(
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
    balance_source: SolanaBalanceClient = Depends(get_balance_source),
) -> Any:
    """Fetch the live token balance for the linked wallet and store it."""
    if identity.profile_id is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    if not identity.wallet_address:
        raise HTTPException(status_code=400, detail="No wallet linked to this profile")

    balance = balance_source.fetch_balance_sync(identity.wallet_address)
    result = run_record_balance(
        RecordBalanceInput(actor=identity, profile_id=identity.profile_id, token_balance=balance),
        repo,
        policy,
    )
    if not result.success:
        raise_for_error(result.error)
    return result.profile


@router.get("/wallet/{wallet_address}", response_model=ProfileResponse)
def get_profile_by_wallet(
    wallet_address: str, repo: SQLiteProfileRepo = Depends(get_profile_repo)
) -> Any:
    result = run_get_profile_by_wallet(GetProfileByWalletInput(wallet_address), repo)
    if not result.success:
        raise_for_error(result.error)
    return result.profile


@router.get("/{profile_id}", response_model=ProfileResponse)
def get_profile(profile_id: str, repo: SQLiteProfileRepo = Depends(get_profile_repo)) -> Any:
    result = run_get_profile(GetProfileInput(profile_id), repo)
    if not result.success:
        raise_for_error(result.error)
    return result.profile


@router.get("/{profile_id}/stats")
def get_profile_stats(
    profile_id: str,
    repo: SQLiteProfileRepo = Depends(get_profile_repo),
    job_repo: SQLiteJobPostRepo = Depends(get_job_repo),
    contract_repo: SQLiteContractRepo = Depends(get_contract_repo),
) -> dict[str, int]:
    result = run_profile_stats(ProfileStatsInput(profile_id), repo, job_repo, contract_repo)
    if not result.success or result.stats is None:
        raise_for_error(result.error)
    return result.stats.to_dict()


@router.patch("/{profile_id}", response_model=ProfileResponse)
def update_profile(
    profile_id: str,
    req: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> Any:
    """Update a profile. Owners edit their own fields; admins may edit any."""
    result = run_update_profile(
        UpdateProfileInput(
            actor=identity, profile_id=profile_id, updates=req.model_dump(exclude_unset=True)
        ),
        repo,
        policy,
    )
    if not result.success:
        raise_for_error(result.error)
    return result.profile
