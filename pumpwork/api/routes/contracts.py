"""Contract routes: hiring, delivery, review and escrow."""

from fastapi import APIRouter, Depends

from pumpwork.adapters.clock import SystemClock
from pumpwork.adapters.sqlite.repos import (
    SQLiteContractRepo,
    SQLiteJobPostRepo,
    SQLiteProfileRepo,
    SQLiteServicePostRepo,
)
from pumpwork.api.deps import (
    get_clock,
    get_contract_repo,
    get_current_identity,
    get_job_repo,
    get_policy,
    get_profile_repo,
    get_service_repo,
)
from pumpwork.api.errors import raise_for_error
from pumpwork.api.schemas import (
    ContractCreateRequest,
    ContractListResponse,
    ContractStatusRequest,
    EscrowRequest,
    NotesRequest,
)
from pumpwork.components.contracts import (
    ContractActionInput,
    ContractListOutput,
    ContractOutput,
    CreateContractInput,
    ListContractsInput,
    RequestRevisionsInput,
    SubmitWorkInput,
    UpdateContractStatusInput,
    UpdateEscrowInput,
    run_approve_work,
    run_cancel_contract,
    run_complete_contract,
    run_create_contract,
    run_get_contract,
    run_list_client_contracts,
    run_list_freelancer_contracts,
    run_request_revisions,
    run_submit_work,
    run_update_contract_status,
    run_update_escrow,
)
from pumpwork.domain.access import Identity
from pumpwork.domain.entities import Contract, ContractStatus
from pumpwork.domain.policy import PolicyEngine

router = APIRouter()


def _unwrap(result: ContractOutput) -> Contract:
    if not result.success or result.contract is None:
        raise_for_error(result.error)
    return result.contract


def _listing(result: ContractListOutput) -> ContractListResponse:
    if not result.success:
        raise_for_error(result.error)
    return ContractListResponse(items=result.contracts, total=result.total)


@router.get("/client/{client_id}", response_model=ContractListResponse)
def list_client_contracts(
    client_id: str,
    status: ContractStatus | None = None,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ContractListResponse:
    inp = ListContractsInput(actor=identity, party_id=client_id, status=status)
    return _listing(run_list_client_contracts(inp, repo, profiles, policy))


@router.get("/freelancer/{freelancer_id}", response_model=ContractListResponse)
def list_freelancer_contracts(
    freelancer_id: str,
    status: ContractStatus | None = None,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ContractListResponse:
    inp = ListContractsInput(actor=identity, party_id=freelancer_id, status=status)
    return _listing(run_list_freelancer_contracts(inp, repo, profiles, policy))


@router.post("", response_model=Contract, status_code=201)
def create_contract(
    req: ContractCreateRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    jobs: SQLiteJobPostRepo = Depends(get_job_repo),
    services: SQLiteServicePostRepo = Depends(get_service_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    """Hire a freelancer. The caller becomes the contract's client."""
    inp = CreateContractInput(actor=identity, **req.model_dump())
    return _unwrap(run_create_contract(inp, repo, profiles, jobs, services, policy, clock))


@router.get("/{contract_id}", response_model=Contract)
def get_contract(
    contract_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    profiles: SQLiteProfileRepo = Depends(get_profile_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> Contract:
    inp = ContractActionInput(actor=identity, contract_id=contract_id)
    return _unwrap(run_get_contract(inp, repo, profiles, policy))


@router.patch("/{contract_id}/status", response_model=Contract)
def update_contract_status(
    contract_id: str,
    req: ContractStatusRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    inp = UpdateContractStatusInput(actor=identity, contract_id=contract_id, status=req.status)
    return _unwrap(run_update_contract_status(inp, repo, policy, clock))


@router.post("/{contract_id}/complete", response_model=Contract)
def complete_contract(
    contract_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    inp = ContractActionInput(actor=identity, contract_id=contract_id)
    return _unwrap(run_complete_contract(inp, repo, policy, clock))


@router.post("/{contract_id}/cancel", response_model=Contract)
def cancel_contract(
    contract_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    inp = ContractActionInput(actor=identity, contract_id=contract_id)
    return _unwrap(run_cancel_contract(inp, repo, policy, clock))


@router.post("/{contract_id}/submit", response_model=Contract)
def submit_work(
    contract_id: str,
    req: NotesRequest | None = None,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    notes = req.notes if req else None
    inp = SubmitWorkInput(actor=identity, contract_id=contract_id, notes=notes)
    return _unwrap(run_submit_work(inp, repo, policy, clock))


@router.post("/{contract_id}/approve", response_model=Contract)
def approve_work(
    contract_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    inp = ContractActionInput(actor=identity, contract_id=contract_id)
    return _unwrap(run_approve_work(inp, repo, policy, clock))


@router.post("/{contract_id}/revisions", response_model=Contract)
def request_revisions(
    contract_id: str,
    req: NotesRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    inp = RequestRevisionsInput(actor=identity, contract_id=contract_id, notes=req.notes or "")
    return _unwrap(run_request_revisions(inp, repo, policy, clock))


@router.put("/{contract_id}/escrow", response_model=Contract)
def update_escrow(
    contract_id: str,
    req: EscrowRequest,
    identity: Identity = Depends(get_current_identity),
    repo: SQLiteContractRepo = Depends(get_contract_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> Contract:
    inp = UpdateEscrowInput(actor=identity, contract_id=contract_id, amount=req.amount)
    return _unwrap(run_update_escrow(inp, repo, policy, clock))
