"""
Profiles component - lookup, browsing, self-service edits and stats.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pumpwork.domain.errors import duplicate, forbidden, invalid, not_found
from pumpwork.domain.policy import PolicyEngine

from .models import (
    GetProfileByWalletInput,
    GetProfileInput,
    ListProfilesInput,
    ProfileListOutput,
    ProfileOutput,
    ProfileStats,
    ProfileStatsInput,
    ProfileStatsOutput,
    RecordBalanceInput,
    UpdateProfileInput,
)
from .ports import CountingRepoPort, ProfileRepoPort

logger = logging.getLogger(__name__)

SORTABLE = frozenset({"created_at", "updated_at", "rating", "nickname", "review_count"})

EDITABLE_FIELDS = frozenset({"nickname", "email", "bio", "skills", "wallet_address", "user_type"})
ADMIN_FIELDS = EDITABLE_FIELDS | {
    "token_balance",
    "rating",
    "review_count",
    "jobs_completed",
    "jobs_posted",
    "total_earned",
    "total_spent",
}

WALLET_TAKEN = "This wallet is already registered"


def run_get_profile(inp: GetProfileInput, repo: ProfileRepoPort) -> ProfileOutput:
    profile = repo.get_by_id(inp.profile_id)
    if profile is None:
        return ProfileOutput(
            profile=None, success=False, error=not_found("Profile", inp.profile_id)
        )
    return ProfileOutput(profile=profile, success=True)


def run_get_profile_by_wallet(
    inp: GetProfileByWalletInput, repo: ProfileRepoPort
) -> ProfileOutput:
    profile = repo.get_by_wallet(inp.wallet_address)
    if profile is None:
        return ProfileOutput(
            profile=None, success=False, error=not_found("Wallet profile", inp.wallet_address)
        )
    return ProfileOutput(profile=profile, success=True)


def run_list_profiles(inp: ListProfilesInput, repo: ProfileRepoPort) -> ProfileListOutput:
    """List profiles; unknown sort columns fall back to newest first."""
    sort_by = inp.sort_by if inp.sort_by in SORTABLE else "created_at"
    profiles = repo.list(
        user_type=inp.user_type,
        skills=inp.skills,
        min_rating=inp.min_rating,
        sort_by=sort_by,
        sort_order="asc" if inp.sort_order == "asc" else "desc",
    )
    return ProfileListOutput(profiles=profiles, total=len(profiles))


def run_update_profile(
    inp: UpdateProfileInput, repo: ProfileRepoPort, policy: PolicyEngine
) -> ProfileOutput:
    actor = inp.actor
    is_admin = policy.can_view_admin(actor)
    if not is_admin and not policy.is_party(actor, inp.profile_id):
        return ProfileOutput(profile=None, success=False, error=forbidden())

    allowed = ADMIN_FIELDS if is_admin else EDITABLE_FIELDS
    rejected = sorted(set(inp.updates) - allowed)
    if rejected:
        return ProfileOutput(
            profile=None,
            success=False,
            error=invalid(f"Cannot update field(s): {', '.join(rejected)}", field=rejected[0]),
        )

    if inp.updates.get("user_type") == "admin" and not is_admin:
        return ProfileOutput(
            profile=None, success=False, error=forbidden("Only admins can grant the admin role")
        )

    if "nickname" in inp.updates and not str(inp.updates["nickname"] or "").strip():
        return ProfileOutput(
            profile=None, success=False, error=invalid("Nickname is required", field="nickname")
        )

    wallet = inp.updates.get("wallet_address")
    if wallet:
        owner = repo.get_by_wallet(wallet)
        if owner is not None and str(owner.id) != str(inp.profile_id):
            return ProfileOutput(profile=None, success=False, error=duplicate(WALLET_TAKEN))

    try:
        profile = repo.update_fields(inp.profile_id, dict(inp.updates))
    except ValidationError as e:
        return ProfileOutput(profile=None, success=False, error=invalid(str(e)))

    if profile is None:
        return ProfileOutput(
            profile=None, success=False, error=not_found("Profile", inp.profile_id)
        )

    logger.info("Updated profile %s fields=%s", profile.id, sorted(inp.updates))
    return ProfileOutput(profile=profile, success=True)


def run_record_balance(
    inp: RecordBalanceInput, repo: ProfileRepoPort, policy: PolicyEngine
) -> ProfileOutput:
    if not policy.can_view_admin(inp.actor) and not policy.is_party(inp.actor, inp.profile_id):
        return ProfileOutput(profile=None, success=False, error=forbidden())
    if inp.token_balance < 0:
        return ProfileOutput(
            profile=None,
            success=False,
            error=invalid("Token balance cannot be negative", field="token_balance"),
        )

    profile = repo.update_fields(inp.profile_id, {"token_balance": inp.token_balance})
    if profile is None:
        return ProfileOutput(
            profile=None, success=False, error=not_found("Profile", inp.profile_id)
        )
    return ProfileOutput(profile=profile, success=True)


def run_profile_stats(
    inp: ProfileStatsInput,
    repo: ProfileRepoPort,
    job_repo: CountingRepoPort,
    contract_repo: CountingRepoPort,
) -> ProfileStatsOutput:
    if repo.get_by_id(inp.profile_id) is None:
        return ProfileStatsOutput(
            stats=None, success=False, error=not_found("Profile", inp.profile_id)
        )

    profile_id = str(inp.profile_id)
    stats = ProfileStats(
        jobs_posted=job_repo.count(client_id=profile_id),
        contracts_as_client=contract_repo.count(client_id=profile_id),
        contracts_as_freelancer=contract_repo.count(freelancer_id=profile_id),
        completed_jobs=contract_repo.count(freelancer_id=profile_id, status="completed"),
    )
    return ProfileStatsOutput(stats=stats, success=True)
