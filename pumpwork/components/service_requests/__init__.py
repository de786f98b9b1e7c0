"""
Service requests component - clients requesting freelancer services.
"""

from .component import (
    ALREADY_REQUESTED,
    SERVICE_UNAVAILABLE,
    run_accept_service_request,
    run_check_service_request,
    run_create_service_request,
    run_get_service_request,
    run_list_client_requests,
    run_list_freelancer_requests,
    run_list_service_requests,
    run_reject_service_request,
    run_update_service_request_status,
    run_withdraw_service_request,
)
from .models import (
    CheckServiceRequestInput,
    CreateServiceRequestInput,
    GetServiceRequestInput,
    ListPartyRequestsInput,
    ListServiceRequestsInput,
    ServiceRequestCheckOutput,
    ServiceRequestListOutput,
    ServiceRequestOutput,
    UpdateServiceRequestStatusInput,
)
from .ports import ProfileLookupPort, ServiceLookupPort, ServiceRequestRepoPort, TimePort

__all__ = [
    # Entry points
    "run_accept_service_request",
    "run_check_service_request",
    "run_create_service_request",
    "run_get_service_request",
    "run_list_client_requests",
    "run_list_freelancer_requests",
    "run_list_service_requests",
    "run_reject_service_request",
    "run_update_service_request_status",
    "run_withdraw_service_request",
    "ALREADY_REQUESTED",
    "SERVICE_UNAVAILABLE",
    # Models
    "CheckServiceRequestInput",
    "CreateServiceRequestInput",
    "GetServiceRequestInput",
    "ListPartyRequestsInput",
    "ListServiceRequestsInput",
    "ServiceRequestCheckOutput",
    "ServiceRequestListOutput",
    "ServiceRequestOutput",
    "UpdateServiceRequestStatusInput",
    # Ports
    "ProfileLookupPort",
    "ServiceLookupPort",
    "ServiceRequestRepoPort",
    "TimePort",
]
