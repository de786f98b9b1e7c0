"""
Contracts component - agreements between a client and a freelancer.

Lifecycle: ``active`` -> ``submitted`` (freelancer delivers) -> either
``completed`` (client approves) or back to ``active`` with revision notes.
Either party may cancel an open contract.
"""

from __future__ import annotations

import logging
from typing import Any, get_args

from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Contract, ContractStatus, attach_summaries
from pumpwork.domain.errors import OperationError, forbidden, invalid, not_found
from pumpwork.domain.policy import PolicyEngine
from pumpwork.domain.validation import validate_post_fields

from .models import (
    ContractActionInput,
    ContractListOutput,
    ContractOutput,
    CreateContractInput,
    ListContractsInput,
    RequestRevisionsInput,
    SubmitWorkInput,
    UpdateContractStatusInput,
    UpdateEscrowInput,
)
from .ports import (
    ContractRepoPort,
    JobLookupPort,
    ProfileLookupPort,
    ServiceLookupPort,
    TimePort,
)

logger = logging.getLogger(__name__)

OPEN_STATUSES = frozenset({"active", "submitted"})
FINAL_STATUSES = frozenset({"completed", "cancelled"})
CONTRACT_STATUSES = frozenset(get_args(ContractStatus))


def _with_parties(contracts: list[Contract], profiles: ProfileLookupPort) -> list[Contract]:
    return attach_summaries(
        contracts, profiles.get_many, client="client_id", freelancer="freelancer_id"
    )


def _failed(error: OperationError) -> ContractOutput:
    return ContractOutput(contract=None, success=False, error=error)


def _apply(
    contract: Contract, updates: dict[str, Any], repo: ContractRepoPort, time: TimePort
) -> ContractOutput:
    updated = contract.model_copy(update={**updates, "updated_at": time.now_utc()})
    repo.save(updated)
    logger.info("Contract %s -> %s", updated.id, updated.status)
    return ContractOutput(contract=updated, success=True)


def _missing(contract_id: Any) -> ContractOutput:
    return _failed(not_found("Contract", contract_id))


def _is_client(
    policy: PolicyEngine, actor: Identity | None, contract: Contract, action: str
) -> bool:
    return policy.can_manage(actor, action, contract.client_id)


# --- Queries ---


def _list(
    inp: ListContractsInput,
    column: str,
    repo: ContractRepoPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ContractListOutput:
    if not policy.can_view_admin(inp.actor) and not policy.is_party(inp.actor, inp.party_id):
        return ContractListOutput(contracts=[], total=0, success=False, error=forbidden())
    contracts = _with_parties(repo.list_by_party(column, inp.party_id, inp.status), profiles)
    return ContractListOutput(contracts=contracts, total=len(contracts))


def run_list_client_contracts(
    inp: ListContractsInput,
    repo: ContractRepoPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ContractListOutput:
    return _list(inp, "client_id", repo, profiles, policy)


def run_list_freelancer_contracts(
    inp: ListContractsInput,
    repo: ContractRepoPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ContractListOutput:
    return _list(inp, "freelancer_id", repo, profiles, policy)


def run_get_contract(
    inp: ContractActionInput,
    repo: ContractRepoPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ContractOutput:
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not policy.can_view_admin(inp.actor) and not policy.is_party(
        inp.actor, contract.client_id, contract.freelancer_id
    ):
        return _failed(forbidden())
    return ContractOutput(contract=_with_parties([contract], profiles)[0], success=True)


# --- Commands ---


def run_create_contract(
    inp: CreateContractInput,
    repo: ContractRepoPort,
    profiles: ProfileLookupPort,
    jobs: JobLookupPort,
    services: ServiceLookupPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ContractOutput:
    actor = inp.actor
    if actor is None or actor.profile_id is None or not policy.check_permission(
        actor, "contracts:create"
    ):
        return _failed(forbidden("Client access required"))

    if str(inp.freelancer_id) == actor.profile_id:
        return _failed(invalid("You cannot hire yourself", field="freelancer_id"))
    if str(inp.freelancer_id) not in profiles.get_many([inp.freelancer_id]):
        return _failed(not_found("Profile", inp.freelancer_id))

    error = validate_post_fields(
        title=inp.title, amount=inp.agreed_amount, amount_field="agreed_amount"
    )
    if error is None and inp.escrow_amount < 0:
        error = invalid("Escrow amount cannot be negative", field="escrow_amount")
    if error:
        return _failed(error)

    if inp.job_post_id is not None:
        job = jobs.get_by_id(inp.job_post_id)
        if job is None:
            return _failed(not_found("Job", inp.job_post_id))
        if str(job.client_id) != actor.profile_id and not actor.is_admin:
            return _failed(forbidden("Contracts can only be created for your own jobs"))

    if inp.service_post_id is not None:
        service = services.get_by_id(inp.service_post_id)
        if service is None:
            return _failed(not_found("Service", inp.service_post_id))
        if str(service.freelancer_id) != str(inp.freelancer_id):
            return _failed(
                invalid("Service belongs to another freelancer", field="service_post_id")
            )

    now = time.now_utc()
    contract = Contract(
        client_id=actor.profile_id,
        freelancer_id=inp.freelancer_id,
        job_post_id=inp.job_post_id,
        service_post_id=inp.service_post_id,
        title=inp.title.strip(),
        description=inp.description,
        agreed_amount=inp.agreed_amount,
        escrow_amount=inp.escrow_amount,
        status="active",
        created_at=now,
        updated_at=now,
    )
    repo.save(contract)
    logger.info(
        "Contract %s created between %s and %s", contract.id, contract.client_id, inp.freelancer_id
    )
    return ContractOutput(contract=contract, success=True)


def run_update_contract_status(
    inp: UpdateContractStatusInput,
    repo: ContractRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ContractOutput:
    """Set a status directly. Moving to ``completed`` stamps ``completed_at``."""
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not policy.can_view_admin(inp.actor) and not policy.is_party(
        inp.actor, contract.client_id, contract.freelancer_id
    ):
        return _failed(forbidden())
    if inp.status not in CONTRACT_STATUSES:
        return _failed(invalid(f"Unknown contract status {inp.status}", field="status"))
    if contract.status in FINAL_STATUSES:
        return _failed(invalid(f"Contract is already {contract.status}", field="status"))

    updates: dict[str, Any] = {"status": inp.status}
    if inp.status == "completed":
        updates["completed_at"] = time.now_utc()
    return _apply(contract, updates, repo, time)


def run_complete_contract(
    inp: ContractActionInput, repo: ContractRepoPort, policy: PolicyEngine, time: TimePort
) -> ContractOutput:
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not _is_client(policy, inp.actor, contract, "contracts:review"):
        return _failed(forbidden("Only the client can complete this contract"))
    if contract.status not in OPEN_STATUSES:
        return _failed(invalid(f"Contract is already {contract.status}", field="status"))
    return _apply(contract, {"status": "completed", "completed_at": time.now_utc()}, repo, time)


def run_cancel_contract(
    inp: ContractActionInput, repo: ContractRepoPort, policy: PolicyEngine, time: TimePort
) -> ContractOutput:
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not policy.can_view_admin(inp.actor) and not policy.is_party(
        inp.actor, contract.client_id, contract.freelancer_id
    ):
        return _failed(forbidden())
    if contract.status not in OPEN_STATUSES:
        return _failed(invalid(f"Contract is already {contract.status}", field="status"))
    return _apply(contract, {"status": "cancelled"}, repo, time)


def run_submit_work(
    inp: SubmitWorkInput, repo: ContractRepoPort, policy: PolicyEngine, time: TimePort
) -> ContractOutput:
    """Freelancer delivers. Notes, when given, replace the description."""
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not policy.can_manage(inp.actor, "contracts:submit", contract.freelancer_id):
        return _failed(forbidden("Only the freelancer can submit work"))
    if contract.status != "active":
        return _failed(
            invalid("Work can only be submitted on an active contract", field="status")
        )

    updates: dict[str, Any] = {"status": "submitted", "submitted_at": time.now_utc()}
    if inp.notes and inp.notes.strip():
        updates["description"] = inp.notes.strip()
    return _apply(contract, updates, repo, time)


def run_approve_work(
    inp: ContractActionInput, repo: ContractRepoPort, policy: PolicyEngine, time: TimePort
) -> ContractOutput:
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not _is_client(policy, inp.actor, contract, "contracts:review"):
        return _failed(forbidden("Only the client can approve work"))
    if contract.status != "submitted":
        return _failed(invalid("There is no submitted work to approve", field="status"))
    return _apply(contract, {"status": "completed", "completed_at": time.now_utc()}, repo, time)


def run_request_revisions(
    inp: RequestRevisionsInput, repo: ContractRepoPort, policy: PolicyEngine, time: TimePort
) -> ContractOutput:
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not _is_client(policy, inp.actor, contract, "contracts:review"):
        return _failed(forbidden("Only the client can request revisions"))
    if contract.status != "submitted":
        return _failed(invalid("There is no submitted work to revise", field="status"))
    if not inp.notes or not inp.notes.strip():
        return _failed(invalid("Revision notes are required", field="notes"))

    return _apply(
        contract,
        {
            "status": "active",
            "revision_notes": inp.notes.strip(),
            "revision_count": contract.revision_count + 1,
        },
        repo,
        time,
    )


def run_update_escrow(
    inp: UpdateEscrowInput, repo: ContractRepoPort, policy: PolicyEngine, time: TimePort
) -> ContractOutput:
    contract = repo.get_by_id(inp.contract_id)
    if contract is None:
        return _missing(inp.contract_id)
    if not _is_client(policy, inp.actor, contract, "contracts:review"):
        return _failed(forbidden())
    if inp.amount < 0:
        return _failed(invalid("Escrow amount cannot be negative", field="amount"))
    return _apply(contract, {"escrow_amount": inp.amount}, repo, time)
