from fastapi import APIRouter, Depends

from pumpwork.adapters.clock import SystemClock
from pumpwork.adapters.sqlite.repos import SQLiteContractRepo, SQLiteProfileRepo, SQLiteReviewRepo
from pumpwork.api.deps import (
    get_clock,
    get_contract_repo,
    get_current_identity,
    get_policy,
    get_profile_repo,
    get_review_repo,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import ReviewCheckResponse, ReviewCreateRequest, ReviewListResponse
from pumpwork.components.reviews import (
    ContractReviewInput,
    CreateReviewInput,
    ListReviewerReviewsInput,
    ListUserReviewsInput,
    run_check_review_exists,
    run_create_review,
    run_get_contract_review,
    run_list_reviews_by_reviewer,
    run_list_user_reviews,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Review
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


@router.get("/user/{user_id}", response_model=ReviewListResponse)
def list_user_reviews(
    user_id: str,
    repo: SQLiteReviewRepo = Depends(get_review_repo),
    contracts: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> ReviewListResponse:
    """Reviews received by a user, newest first."""
    result = run_list_user_reviews(ListUserReviewsInput(user_id), repo, contracts, profiles)
    return ReviewListResponse(items=result.reviews, total=result.total)


@router.get("/reviewer/{reviewer_id}", response_model=ReviewListResponse)
def list_reviews_by_reviewer(
    reviewer_id: str,
    repo: SQLiteReviewRepo = Depends(get_review_repo),
    contracts: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> ReviewListResponse:
    result = run_list_reviews_by_reviewer(
        ListReviewerReviewsInput(reviewer_id), repo, contracts, profiles
    )
    return ReviewListResponse(items=result.reviews, total=result.total)


@router.post("", response_model=Review, status_code=201)
def create_review(
    req: ReviewCreateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteReviewRepo = Depends(get_review_repo),
    contracts: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Review:
    inp = CreateReviewInput(
        actor=identity, contract_id=req.contract_id, rating=req.rating, comment=req.comment
    )
    result = run_create_review(inp, repo, contracts, profiles, policy, clock)
    if not result.success or result.review is None:
        raise_for_error(result.error)
    return result.review


@router.get("/contract/{contract_id}", response_model=Review)
def get_contract_review(
    contract_id: str,
    reviewer_id: str,
    repo: SQLiteReviewRepo = Depends(get_review_repo),
    contracts: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
) -> Review:
    """The review a given reviewer left on a contract."""
    result = run_get_contract_review(
        ContractReviewInput(contract_id, reviewer_id), repo, contracts, profiles
    )
    if not result.success or result.review is None:
        raise_for_error(result.error)
    return result.review


@router.get("/contract/{contract_id}/exists", response_model=ReviewCheckResponse)
def check_review_exists(
    contract_id: str,
    reviewer_id: str,
    repo: SQLiteReviewRepo = Depends(get_review_repo),
) -> ReviewCheckResponse:
    result = run_check_review_exists(ContractReviewInput(contract_id, reviewer_id), repo)
    return ReviewCheckResponse(exists=result.exists)
