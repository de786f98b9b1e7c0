"""
Services component - fixed-price offers published by freelancers.

Deletion is soft: the row stays with status ``deleted`` so existing
requests and contracts keep their reference.
"""

from __future__ import annotations

import logging
from typing import Any

from pumpwork.domain.entities import ServicePost, attach_summaries
from pumpwork.domain.errors import forbidden, invalid, not_found
from pumpwork.domain.policy import PolicyEngine
from pumpwork.domain.validation import clean_skills, validate_post_fields

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

logger = logging.getLogger(__name__)

SORTABLE = frozenset({"created_at", "updated_at", "price", "title"})


def _with_freelancer(
    services: list[ServicePost], profiles: ProfileLookupPort
) -> list[ServicePost]:
    return attach_summaries(services, profiles.get_many, freelancer="freelancer_id")


def run_list_services(
    inp: ListServicesInput, repo: ServiceRepoPort, profiles: ProfileLookupPort
) -> ServiceListOutput:
    services = repo.list(
        statuses=[inp.status or "active"],
        category=inp.category,
        skills=inp.skills,
        price_min=inp.price_min,
        price_max=inp.price_max,
        search=inp.search.strip() if inp.search else None,
        sort_by=inp.sort_by if inp.sort_by in SORTABLE else "created_at",
        sort_order="asc" if inp.sort_order == "asc" else "desc",
    )
    return ServiceListOutput(services=_with_freelancer(services, profiles), total=len(services))


def run_get_service(
    inp: GetServiceInput, repo: ServiceRepoPort, profiles: ProfileLookupPort
) -> ServiceOutput:
    service = repo.get_by_id(inp.service_id)
    if service is None:
        return ServiceOutput(
            service=None, success=False, error=not_found("Service", inp.service_id)
        )
    return ServiceOutput(service=_with_freelancer([service], profiles)[0], success=True)


def run_list_freelancer_services(
    inp: ListFreelancerServicesInput, repo: ServiceRepoPort, profiles: ProfileLookupPort
) -> ServiceListOutput:
    services = repo.list_by_freelancer(inp.freelancer_id)
    return ServiceListOutput(services=_with_freelancer(services, profiles), total=len(services))


def run_create_service(
    inp: CreateServiceInput, repo: ServiceRepoPort, policy: PolicyEngine, time: TimePort
) -> ServiceOutput:
    actor = inp.actor
    if actor is None or actor.profile_id is None or not policy.check_permission(
        actor, "services:create"
    ):
        return ServiceOutput(
            service=None, success=False, error=forbidden("Freelancer access required")
        )

    error = validate_post_fields(inp.title, inp.description, inp.price, "price")
    if error:
        return ServiceOutput(service=None, success=False, error=error)

    now = time.now_utc()
    service = ServicePost(
        freelancer_id=actor.profile_id,
        title=inp.title.strip(),
        description=inp.description.strip(),
        category=inp.category,
        skills=clean_skills(inp.skills) or [],
        price=inp.price,
        price_type=inp.price_type,
        delivery_time=inp.delivery_time,
        status="active",
        created_at=now,
        updated_at=now,
    )
    repo.save(service)
    logger.info("Service %s published by %s", service.id, service.freelancer_id)
    return ServiceOutput(service=service, success=True)


def run_update_service(
    inp: UpdateServiceInput, repo: ServiceRepoPort, policy: PolicyEngine, time: TimePort
) -> ServiceOutput:
    service = repo.get_by_id(inp.service_id)
    if service is None:
        return ServiceOutput(
            service=None, success=False, error=not_found("Service", inp.service_id)
        )
    if not policy.can_manage(inp.actor, "services:manage", service.freelancer_id):
        return ServiceOutput(service=None, success=False, error=forbidden())

    error = validate_post_fields(inp.title, inp.description, inp.price, "price")
    if error:
        return ServiceOutput(service=None, success=False, error=error)

    fields: dict[str, Any] = {
        "title": inp.title.strip() if inp.title is not None else None,
        "description": inp.description.strip() if inp.description is not None else None,
        "category": inp.category,
        "skills": clean_skills(inp.skills),
        "price": inp.price,
        "price_type": inp.price_type,
        "delivery_time": inp.delivery_time,
        "status": inp.status,
    }
    updates = {k: v for k, v in fields.items() if v is not None}
    if not updates:
        return ServiceOutput(service=None, success=False, error=invalid("Nothing to update"))

    updates["updated_at"] = time.now_utc()
    updated = ServicePost.model_validate({**service.model_dump(), **updates})
    repo.save(updated)
    return ServiceOutput(service=updated, success=True)


def run_delete_service(
    inp: DeleteServiceInput, repo: ServiceRepoPort, policy: PolicyEngine, time: TimePort
) -> ServiceOutput:
    service = repo.get_by_id(inp.service_id)
    if service is None:
        return ServiceOutput(
            service=None, success=False, error=not_found("Service", inp.service_id)
        )
    if not policy.can_manage(inp.actor, "services:manage", service.freelancer_id):
        return ServiceOutput(service=None, success=False, error=forbidden())

    deleted = service.model_copy(update={"status": "deleted", "updated_at": time.now_utc()})
    repo.save(deleted)
    logger.info("Service %s marked deleted", service.id)
    return ServiceOutput(service=deleted, success=True)
