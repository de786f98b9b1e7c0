"""
Contracts component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Contract, ContractStatus
from pumpwork.domain.errors import OperationError


@dataclass(frozen=True)
class ListContractsInput:
    actor: Identity | None
    party_id: UUID | str
    status: ContractStatus | None = None


@dataclass(frozen=True)
class CreateContractInput:
    """Hire a freelancer. The acting client becomes the contract's client."""

    actor: Identity | None
    freelancer_id: UUID | str
    title: str
    agreed_amount: float
    description: str | None = None
    escrow_amount: float = 0
    job_post_id: UUID | str | None = None
    service_post_id: UUID | str | None = None


@dataclass(frozen=True)
class ContractActionInput:
    actor: Identity | None
    contract_id: UUID | str


@dataclass(frozen=True)
class UpdateContractStatusInput:
    actor: Identity | None
    contract_id: UUID | str
    status: ContractStatus


@dataclass(frozen=True)
class SubmitWorkInput:
    actor: Identity | None
    contract_id: UUID | str
    notes: str | None = None


@dataclass(frozen=True)
class RequestRevisionsInput:
    actor: Identity | None
    contract_id: UUID | str
    notes: str


@dataclass(frozen=True)
class UpdateEscrowInput:
    actor: Identity | None
    contract_id: UUID | str
    amount: float


@dataclass(frozen=True)
class ContractOutput:
    contract: Contract | None
    success: bool
    error: OperationError | None = None


@dataclass(frozen=True)
class ContractListOutput:
    contracts: list[Contract]
    total: int
    success: bool = True
    error: OperationError | None = None
