"""
Service requests component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import ServiceRequest, ServiceRequestStatus
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class ListServiceRequestsInput:
    actor: Identity | None
    service_post_id: UUID | str


@dataclass(frozen=True)
class ListPartyRequestsInput:
    """Requests received by a freelancer or sent by a client."""

    actor: Identity | None
    party_id: UUID | str


@dataclass(frozen=True)
class CreateServiceRequestInput:
    actor: Identity | None
    service_post_id: UUID | str
    message: str = ""
    budget: float | None = None


@dataclass(frozen=True)
class UpdateServiceRequestStatusInput:
    actor: Identity | None
    request_id: UUID | str
    status: ServiceRequestStatus


@dataclass(frozen=True)
class GetServiceRequestInput:
    actor: Identity | None
    request_id: UUID | str


@dataclass(frozen=True)
class CheckServiceRequestInput:
    service_post_id: UUID | str
    client_id: UUID | str


@dataclass(frozen=True)
class ServiceRequestOutput:
    request: ServiceRequest | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class ServiceRequestListOutput:
    requests: list[ServiceRequest]
    total: int
    success: bool = True
    error: OperationError | None = None


@dataclass(frozen=True)
class ServiceRequestCheckOutput:
    exists: bool
    request_id: UUID | None = None
    status: ServiceRequestStatus | None = None
