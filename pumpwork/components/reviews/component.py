"""
Reviews component - ratings left after a contract.

Each party of a completed contract may review the other once. Writing a
review refreshes the reviewee's average rating and review count.
"""

from __future__ import annotations

import logging

from pumpwork.domain.entities import Contract, Review, attach_summaries
from pumpwork.domain.errors import duplicate, forbidden, invalid, not_found
from pumpwork.domain.policy import PolicyEngine

from .models import (
    ContractReviewInput,
    CreateReviewInput,
    ListReviewerReviewsInput,
    ListUserReviewsInput,
    ReviewCheckOutput,
    ReviewListOutput,
    ReviewOutput,
)
from .ports import ContractLookupPort, ProfileRatingPort, ReviewRepoPort, TimePort

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "You have already reviewed this contract"
MIN_RATING = 1
MAX_RATING = 5
COMMENT_MAX_LENGTH = 2000


def _embed(
    reviews: list[Review], contracts: ContractLookupPort, profiles: ProfileRatingPort
) -> list[Review]:
    by_id: dict[str, Contract | None] = {}
    for review in reviews:
        key = str(review.contract_id)
        if key not in by_id:
            by_id[key] = contracts.get_by_id(review.contract_id)
    embedded = attach_summaries(
        reviews, profiles.get_many, reviewer="reviewer_id", reviewee="reviewee_id"
    )
    return [r.model_copy(update={"contract": by_id.get(str(r.contract_id))}) for r in embedded]


def run_list_user_reviews(
    inp: ListUserReviewsInput,
    repo: ReviewRepoPort,
    contracts: ContractLookupPort,
    profiles: ProfileRatingPort,
) -> ReviewListOutput:
    reviews = _embed(repo.list_by_reviewee(inp.reviewee_id), contracts, profiles)
    return ReviewListOutput(reviews=reviews, total=len(reviews))


def run_list_reviews_by_reviewer(
    inp: ListReviewerReviewsInput,
    repo: ReviewRepoPort,
    contracts: ContractLookupPort,
    profiles: ProfileRatingPort,
) -> ReviewListOutput:
    reviews = _embed(repo.list_by_reviewer(inp.reviewer_id), contracts, profiles)
    return ReviewListOutput(reviews=reviews, total=len(reviews))


def run_create_review(
    inp: CreateReviewInput,
    repo: ReviewRepoPort,
    contracts: ContractLookupPort,
    profiles: ProfileRatingPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ReviewOutput:
    actor = inp.actor
    if actor is None or actor.profile_id is None or not policy.check_permission(
        actor, "reviews:create"
    ):
        return ReviewOutput(review=None, success=False, error=forbidden())

    contract = contracts.get_by_id(inp.contract_id)
    if contract is None:
        return ReviewOutput(
            review=None, success=False, error=not_found("Contract", inp.contract_id)
        )

    if actor.profile_id == str(contract.client_id):
        reviewee_id = contract.freelancer_id
    elif actor.profile_id == str(contract.freelancer_id):
        reviewee_id = contract.client_id
    else:
        return ReviewOutput(
            review=None,
            success=False,
            error=forbidden("Only the parties to a contract can review it"),
        )

    if contract.status != "completed":
        return ReviewOutput(
            review=None,
            success=False,
            error=invalid("Reviews open once the contract is completed", field="contract_id"),
        )
    if not MIN_RATING <= inp.rating <= MAX_RATING:
        return ReviewOutput(
            review=None,
            success=False,
            error=invalid(f"Rating must be between {MIN_RATING} and {MAX_RATING}", "rating"),
        )
    comment = inp.comment.strip() if inp.comment else None
    if comment and len(comment) > COMMENT_MAX_LENGTH:
        return ReviewOutput(
            review=None,
            success=False,
            error=invalid(f"Comment must be {COMMENT_MAX_LENGTH} characters or less", "comment"),
        )

    if repo.get_by_contract_and_reviewer(contract.id, actor.profile_id) is not None:
        return ReviewOutput(review=None, success=False, error=duplicate(ALREADY_REVIEWED))

    review = Review(
        contract_id=contract.id,
        reviewer_id=actor.profile_id,
        reviewee_id=reviewee_id,
        rating=inp.rating,
        comment=comment or None,
        created_at=time.now_utc(),
    )
    repo.save(review)
    updated = profiles.recompute_rating(reviewee_id)
    logger.info(
        "Review %s on contract %s; %s now rated %s",
        review.id,
        contract.id,
        reviewee_id,
        updated.rating if updated else None,
    )
    return ReviewOutput(review=_embed([review], contracts, profiles)[0], success=True)


def run_check_review_exists(inp: ContractReviewInput, repo: ReviewRepoPort) -> ReviewCheckOutput:
    review = repo.get_by_contract_and_reviewer(inp.contract_id, inp.reviewer_id)
    return ReviewCheckOutput(exists=review is not None, review=review)


def run_get_contract_review(
    inp: ContractReviewInput,
    repo: ReviewRepoPort,
    contracts: ContractLookupPort,
    profiles: ProfileRatingPort,
) -> ReviewOutput:
    review = repo.get_by_contract_and_reviewer(inp.contract_id, inp.reviewer_id)
    if review is None:
        return ReviewOutput(
            review=None,
            success=False,
            error=not_found("Review for contract", inp.contract_id),
        )
    return ReviewOutput(review=_embed([review], contracts, profiles)[0], success=True)
