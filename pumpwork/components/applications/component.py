"""
Applications component - freelancers applying to job posts.

A freelancer applies once per job. The job's client accepts or rejects a
pending application; the freelancer may withdraw it while pending.
"""

from __future__ import annotations

import logging

from pumpwork.domain.entities import JobApplication, JobPost, attach_summaries
from pumpwork.domain.errors import duplicate, forbidden, invalid, not_found
from pumpwork.domain.policy import PolicyEngine

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

logger = logging.getLogger(__name__)

ALREADY_APPLIED = "You have already applied to this job"
JOB_CLOSED = "This job is no longer accepting applications"

# status -> statuses it may be reached from
TRANSITIONS: dict[str, frozenset[str]] = {
    "accepted": frozenset({"pending"}),
    "rejected": frozenset({"pending"}),
    "withdrawn": frozenset({"pending"}),
}


def _embed(
    applications: list[JobApplication], jobs: JobLookupPort, profiles: ProfileLookupPort
) -> list[JobApplication]:
    """Attach the freelancer summary and the job post (with its client)."""
    job_posts: dict[str, JobPost] = {}
    for app in applications:
        key = str(app.job_post_id)
        if key not in job_posts:
            job = jobs.get_by_id(app.job_post_id)
            if job is not None:
                job_posts[key] = job
    posts = attach_summaries(list(job_posts.values()), profiles.get_many, client="client_id")
    by_id = {str(p.id): p for p in posts}

    with_freelancer = attach_summaries(applications, profiles.get_many, freelancer="freelancer_id")
    return [
        app.model_copy(update={"job_post": by_id.get(str(app.job_post_id))})
        for app in with_freelancer
    ]


def run_list_job_applications(
    inp: ListJobApplicationsInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ApplicationListOutput:
    job = jobs.get_by_id(inp.job_post_id)
    if job is None:
        return ApplicationListOutput(
            applications=[], total=0, success=False, error=not_found("Job", inp.job_post_id)
        )
    if not policy.can_manage(inp.actor, "applications:review", job.client_id):
        return ApplicationListOutput(applications=[], total=0, success=False, error=forbidden())

    applications = _embed(repo.list_by_job(job.id), jobs, profiles)
    return ApplicationListOutput(applications=applications, total=len(applications))


def run_list_freelancer_applications(
    inp: ListFreelancerApplicationsInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ApplicationListOutput:
    if not policy.can_view_admin(inp.actor) and not policy.is_party(inp.actor, inp.freelancer_id):
        return ApplicationListOutput(applications=[], total=0, success=False, error=forbidden())

    applications = _embed(repo.list_by_freelancer(inp.freelancer_id), jobs, profiles)
    return ApplicationListOutput(applications=applications, total=len(applications))


def run_create_application(
    inp: CreateApplicationInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ApplicationOutput:
    actor = inp.actor
    if actor is None or actor.profile_id is None or not policy.check_permission(
        actor, "applications:create"
    ):
        return ApplicationOutput(
            application=None, success=False, error=forbidden("Freelancer access required")
        )

    job = jobs.get_by_id(inp.job_post_id)
    if job is None:
        return ApplicationOutput(
            application=None, success=False, error=not_found("Job", inp.job_post_id)
        )
    if job.status != "open":
        return ApplicationOutput(application=None, success=False, error=invalid(JOB_CLOSED))
    if str(job.client_id) == actor.profile_id:
        return ApplicationOutput(
            application=None, success=False, error=invalid("You cannot apply to your own job")
        )
    if inp.proposed_rate is not None and inp.proposed_rate < 0:
        return ApplicationOutput(
            application=None,
            success=False,
            error=invalid("Proposed rate cannot be negative", field="proposed_rate"),
        )

    if repo.get_by_job_and_freelancer(job.id, actor.profile_id) is not None:
        return ApplicationOutput(application=None, success=False, error=duplicate(ALREADY_APPLIED))

    now = time.now_utc()
    application = JobApplication(
        job_post_id=job.id,
        freelancer_id=actor.profile_id,
        cover_letter=inp.cover_letter.strip(),
        proposed_rate=inp.proposed_rate,
        status="pending",
        created_at=now,
        updated_at=now,
    )
    repo.save(application)
    logger.info("Application %s on job %s", application.id, job.id)
    return ApplicationOutput(application=application, success=True)


def run_update_application_status(
    inp: UpdateApplicationStatusInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ApplicationOutput:
    application = repo.get_by_id(inp.application_id)
    if application is None:
        return ApplicationOutput(
            application=None, success=False, error=not_found("Application", inp.application_id)
        )

    if inp.status not in TRANSITIONS:
        return ApplicationOutput(
            application=None,
            success=False,
            error=invalid(f"Cannot set status to {inp.status}", field="status"),
        )

    if inp.status == "withdrawn":
        allowed = policy.is_party(inp.actor, application.freelancer_id)
    else:
        job = jobs.get_by_id(application.job_post_id)
        allowed = job is not None and policy.can_manage(
            inp.actor, "applications:review", job.client_id
        )
    if not allowed:
        return ApplicationOutput(application=None, success=False, error=forbidden())

    if application.status not in TRANSITIONS[inp.status]:
        return ApplicationOutput(
            application=None,
            success=False,
            error=invalid(f"Application is already {application.status}", field="status"),
        )

    updated = application.model_copy(
        update={"status": inp.status, "updated_at": time.now_utc()}
    )
    repo.save(updated)
    logger.info("Application %s -> %s", updated.id, inp.status)
    return ApplicationOutput(application=updated, success=True)


def run_withdraw_application(
    inp: GetApplicationInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ApplicationOutput:
    return run_update_application_status(
        UpdateApplicationStatusInput(inp.actor, inp.application_id, "withdrawn"),
        repo,
        jobs,
        policy,
        time,
    )


def run_accept_application(
    inp: GetApplicationInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ApplicationOutput:
    return run_update_application_status(
        UpdateApplicationStatusInput(inp.actor, inp.application_id, "accepted"),
        repo,
        jobs,
        policy,
        time,
    )


def run_reject_application(
    inp: GetApplicationInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ApplicationOutput:
    return run_update_application_status(
        UpdateApplicationStatusInput(inp.actor, inp.application_id, "rejected"),
        repo,
        jobs,
        policy,
        time,
    )


def run_get_application(
    inp: GetApplicationInput,
    repo: ApplicationRepoPort,
    jobs: JobLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ApplicationOutput:
    application = repo.get_by_id(inp.application_id)
    if application is None:
        return ApplicationOutput(
            application=None, success=False, error=not_found("Application", inp.application_id)
        )

    job = jobs.get_by_id(application.job_post_id)
    owners = [application.freelancer_id, job.client_id if job else None]
    if not policy.can_view_admin(inp.actor) and not policy.is_party(inp.actor, *owners):
        return ApplicationOutput(application=None, success=False, error=forbidden())

    return ApplicationOutput(application=_embed([application], jobs, profiles)[0], success=True)


def run_check_application(
    inp: CheckApplicationInput, repo: ApplicationRepoPort
) -> ApplicationCheckOutput:
    application = repo.get_by_job_and_freelancer(inp.job_post_id, inp.freelancer_id)
    if application is None:
        return ApplicationCheckOutput(exists=False)
    return ApplicationCheckOutput(
        exists=True, application_id=application.id, status=application.status
    )
