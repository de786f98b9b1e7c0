"""
Jobs component - job posts.

Clients publish jobs; everyone can browse open work.
"""

from .component import (
    run_create_job,
    run_delete_job,
    run_get_job,
    run_list_client_jobs,
    run_list_jobs,
    run_update_job,
)
from .models import (
    DEFAULT_STATUSES,
    CreateJobInput,
    DeleteJobInput,
    GetJobInput,
    JobListOutput,
    JobOutput,
    ListClientJobsInput,
    ListJobsInput,
    UpdateJobInput,
)
from .ports import JobRepoPort, ProfileLookupPort, TimePort

__all__ = [
    # Entry points
    "run_create_job",
    "run_delete_job",
    "run_get_job",
    "run_list_client_jobs",
    "run_list_jobs",
    "run_update_job",
    # Models
    "DEFAULT_STATUSES",
    "CreateJobInput",
    "DeleteJobInput",
    "GetJobInput",
    "JobListOutput",
    "JobOutput",
    "ListClientJobsInput",
    "ListJobsInput",
    "UpdateJobInput",
    # Ports
    "JobRepoPort",
    "ProfileLookupPort",
    "TimePort",
]
