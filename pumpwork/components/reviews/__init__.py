"""
Reviews component - post-contract ratings.
"""

from .component import (
    ALREADY_REVIEWED,
    run_check_review_exists,
    run_create_review,
    run_get_contract_review,
    run_list_reviews_by_reviewer,
    run_list_user_reviews,
)
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

__all__ = [
    # Entry points
    "run_check_review_exists",
    "run_create_review",
    "run_get_contract_review",
    "run_list_reviews_by_reviewer",
    "run_list_user_reviews",
    "ALREADY_REVIEWED",
    # Models
    "ContractReviewInput",
    "CreateReviewInput",
    "ListReviewerReviewsInput",
    "ListUserReviewsInput",
    "ReviewCheckOutput",
    "ReviewListOutput",
    "ReviewOutput",
    # Ports
    "ContractLookupPort",
    "ProfileRatingPort",
    "ReviewRepoPort",
    "TimePort",
]
