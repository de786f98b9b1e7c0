"""
Reviews component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from pumpwork.domain.entities import Contract, Profile, Review


class ReviewRepoPort(Protocol):
    def save(self, review: Review) -> Review: ...

    def get_by_contract_and_reviewer(
        self, contract_id: UUID | str, reviewer_id: UUID | str
    ) -> Review | None: ...

    def list_by_reviewee(self, reviewee_id: UUID | str) -> list[Review]: ...
    def list_by_reviewer(self, reviewer_id: UUID | str) -> list[Review]: ...


class ContractLookupPort(Protocol):
    def get_by_id(self, contract_id: UUID | str) -> Contract | None: ...


class ProfileRatingPort(Protocol):
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]: ...

    def recompute_rating(self, profile_id: UUID | str) -> Profile | None:
        """Refresh ``rating`` and ``review_count`` from stored reviews."""
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
