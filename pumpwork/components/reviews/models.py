"""
Reviews component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Review
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class ListUserReviewsInput:
    """Reviews received by ``reviewee_id``."""

    reviewee_id: UUID | str


@dataclass(frozen=True)
class ListReviewerReviewsInput:
    """Reviews written by ``reviewer_id``."""

    reviewer_id: UUID | str


@dataclass(frozen=True)
class CreateReviewInput:
    actor: Identity | None
    contract_id: UUID | str
    rating: int
    comment: str | None = None


@dataclass(frozen=True)
class ContractReviewInput:
    contract_id: UUID | str
    reviewer_id: UUID | str


@dataclass(frozen=True)
class ReviewOutput:
    review: Review | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class ReviewListOutput:
    reviews: list[Review]
    total: int
    success: bool = True
    error: OperationError | None = None


@dataclass(frozen=True)
class ReviewCheckOutput:
    exists: bool
    review: Review | None = None
