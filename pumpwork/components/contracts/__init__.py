"""
Contracts component - hiring agreements and work delivery.
"""

from .component import (
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
from .ports import ContractRepoPort, JobLookupPort, ProfileLookupPort, ServiceLookupPort, TimePort

__all__ = [
    # Entry points
    "run_approve_work",
    "run_cancel_contract",
    "run_complete_contract",
    "run_create_contract",
    "run_get_contract",
    "run_list_client_contracts",
    "run_list_freelancer_contracts",
    "run_request_revisions",
    "run_submit_work",
    "run_update_contract_status",
    "run_update_escrow",
    # Models
    "ContractActionInput",
    "ContractListOutput",
    "ContractOutput",
    "CreateContractInput",
    "ListContractsInput",
    "RequestRevisionsInput",
    "SubmitWorkInput",
    "UpdateContractStatusInput",
    "UpdateEscrowInput",
    # Ports
    "ContractRepoPort",
    "JobLookupPort",
    "ProfileLookupPort",
    "ServiceLookupPort",
    "TimePort",
]
