import asyncio
from typing import Any
from uuid import UUID

from pumpwork.adapters.sqlite.repos import SQLiteProfileRepo
from pumpwork.domain.entities import Profile


class AsyncProfileSource:
    """Runs blocking profile repo calls in a worker thread."""

    def __init__(self, repo: SQLiteProfileRepo):
        self.repo = repo

    async def get_by_id(self, profile_id: UUID | str) -> Profile | None:
        return await asyncio.to_thread(self.repo.get_by_id, profile_id)

    async def get_by_wallet(self, wallet_address: str) -> Profile | None:
        return await asyncio.to_thread(self.repo.get_by_wallet, wallet_address)

    async def update_fields(
        self, profile_id: UUID | str, updates: dict[str, Any]
    ) -> Profile | None:
        return await asyncio.to_thread(self.repo.update_fields, profile_id, updates)
