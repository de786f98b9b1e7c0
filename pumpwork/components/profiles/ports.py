"""
Profiles component - Port interfaces.
"""

from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

from pumpwork.domain.entities import Profile


class ProfileRepoPort(Protocol):
    def get_by_id(self, profile_id: UUID | str) -> Profile | None: ...

    def get_by_wallet(self, wallet_address: str) -> Profile | None: ...

    def list(
        self,
        user_type: str | None = None,
        skills: list[str] | None = None,
        min_rating: float | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> list[Profile]: ...

    def update_fields(self, profile_id: UUID | str, updates: dict[str, Any]) -> Profile | None:
        """Merge updates into the stored row. Returns None if missing."""
        ...


class CountingRepoPort(Protocol):
    """Any table repo able to count rows by column equality."""

    def count(self, **equals: Any) -> int: ...
