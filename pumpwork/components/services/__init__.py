"""
Services component - freelancer service posts.
"""

from .component import (
    run_create_service,
    run_delete_service,
    run_get_service,
    run_list_freelancer_services,
    run_list_services,
    run_update_service,
)
from .models import (
    CreateServiceInput,
    DeleteServiceInput,
    GetServiceInput,
    ListFreelancerServicesInput,
    ListServicesInput,
    ServiceListOutput,
    ServiceOutput,
    UpdateServiceInput,
)
from .ports import ProfileLookupPort, ServiceRepoPort, TimePort

__all__ = [
    # Entry points
    "run_create_service",
    "run_delete_service",
    "run_get_service",
    "run_list_freelancer_services",
    "run_list_services",
    "run_update_service",
    # Models
    "CreateServiceInput",
    "DeleteServiceInput",
    "GetServiceInput",
    "ListFreelancerServicesInput",
    "ListServicesInput",
    "ServiceListOutput",
    "ServiceOutput",
    "UpdateServiceInput",
    # Ports
    "ProfileLookupPort",
    "ServiceRepoPort",
    "TimePort",
]
