"""
Contracts component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from pumpwork.domain.entities import Contract, JobPost, Profile, ServicePost


class ContractRepoPort(Protocol):
    def save(self, contract: Contract) -> Contract: ...
    def get_by_id(self, contract_id: UUID | str) -> Contract | None: ...

    def list_by_party(
        self, column: str, party_id: UUID | str, status: str | None = None
    ) -> list[Contract]:
        """``column`` is ``client_id`` or ``freelancer_id``."""
        ...


class JobLookupPort(Protocol):
    def get_by_id(self, job_id: UUID | str) -> JobPost | None: ...


class ServiceLookupPort(Protocol):
    def get_by_id(self, service_id: UUID | str) -> ServicePost | None: ...


class ProfileLookupPort(Protocol):
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
