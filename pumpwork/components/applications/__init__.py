"""
Applications component - job applications.
"""

from .component import (
    ALREADY_APPLIED,
    JOB_CLOSED,
    run_accept_application,
    run_check_application,
    run_create_application,
    run_get_application,
    run_list_freelancer_applications,
    run_list_job_applications,
    run_reject_application,
    run_update_application_status,
    run_withdraw_application,
)
from .models import (
    ApplicationCheckOutput,
    ApplicationListOutput,
    ApplicationOutput,
    CheckApplicationInput,
    CreateApplicationInput,
    GetApplicationInput,
    ListFreelancerApplicationsInput,
    ListJobApplicationsInput,
    UpdateApplicationStatusInput,
)
from .ports import ApplicationRepoPort, JobLookupPort, ProfileLookupPort, TimePort

__all__ = [
    # Entry points
    "run_accept_application",
    "run_check_application",
    "run_create_application",
    "run_get_application",
    "run_list_freelancer_applications",
    "run_list_job_applications",
    "run_reject_application",
    "run_update_application_status",
    "run_withdraw_application",
    "ALREADY_APPLIED",
    "JOB_CLOSED",
    # Models
    "ApplicationCheckOutput",
    "ApplicationListOutput",
    "ApplicationOutput",
    "CheckApplicationInput",
    "CreateApplicationInput",
    "GetApplicationInput",
    "ListFreelancerApplicationsInput",
    "ListJobApplicationsInput",
    "UpdateApplicationStatusInput",
    # Ports
    "ApplicationRepoPort",
    "JobLookupPort",
    "ProfileLookupPort",
    "TimePort",
]
