"""
Service requests component - Port interfaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from pumpwork.domain.entities import Profile, ServicePost, ServiceRequest


class ServiceRequestRepoPort(Protocol):
    def save(self, request: ServiceRequest) -> ServiceRequest: ...
    def get_by_id(self, request_id: UUID | str) -> ServiceRequest | None: ...

    def get_by_service_and_client(
        self, service_post_id: UUID | str, client_id: UUID | str
    ) -> ServiceRequest | None: ...

    def list_by_service(self, service_post_id: UUID | str) -> list[ServiceRequest]: ...
    def list_by_freelancer(self, freelancer_id: UUID | str) -> list[ServiceRequest]: ...
    def list_by_client(self, client_id: UUID | str) -> list[ServiceRequest]: ...


class ServiceLookupPort(Protocol):
    def get_by_id(self, service_id: UUID | str) -> ServicePost | None: ...


class ProfileLookupPort(Protocol):
    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
