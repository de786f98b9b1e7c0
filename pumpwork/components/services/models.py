"""
Services component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import PriceType, ServicePost, ServiceStatus
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class ListServicesInput:
    """Browse filters. Without a status only active services are listed."""

    status: ServiceStatus | None = None
    category: str | None = None
    skills: list[str] | None = None
    price_min: float | None = None
    price_max: float | None = None
    search: str | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


@dataclass(frozen=True)
class GetServiceInput:
    service_id: UUID | str


@dataclass(frozen=True)
class ListFreelancerServicesInput:
    freelancer_id: UUID | str


@dataclass(frozen=True)
class CreateServiceInput:
    actor: Identity | None
    title: str
    description: str
    category: str | None = None
    skills: list[str] = field(default_factory=list)
    price: float = 0
    price_type: PriceType = "fixed"
    delivery_time: str | None = None


@dataclass(frozen=True)
class UpdateServiceInput:
    actor: Identity | None
    service_id: UUID | str
    title: str | None = None
    description: str | None = None
    category: str | None = None
    skills: list[str] | None = None
    price: float | None = None
    price_type: PriceType | None = None
    delivery_time: str | None = None
    status: ServiceStatus | None = None


@dataclass(frozen=True)
class DeleteServiceInput:
    actor: Identity | None
    service_id: UUID | str


@dataclass(frozen=True)
class ServiceOutput:
    service: ServicePost | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class ServiceListOutput:
    services: list[ServicePost]
    total: int
