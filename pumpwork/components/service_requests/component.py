"""
Service requests component - clients asking a freelancer to deliver a
listed service.

One request per client per service. The freelancer accepts or rejects;
the client may withdraw while the request is pending.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pumpwork.domain.entities import ServicePost, ServiceRequest, attach_summaries
from pumpwork.domain.errors import duplicate, forbidden, invalid, not_found
from pumpwork.domain.policy import PolicyEngine

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

logger = logging.getLogger(__name__)

ALREADY_REQUESTED = "You have already sent a request for this service"
SERVICE_UNAVAILABLE = "This service is not accepting requests"

TRANSITIONS: dict[str, frozenset[str]] = {
    "accepted": frozenset({"pending"}),
    "rejected": frozenset({"pending"}),
    "withdrawn": frozenset({"pending"}),
}


def _embed(
    requests: list[ServiceRequest], services: ServiceLookupPort, profiles: ProfileLookupPort
) -> list[ServiceRequest]:
    posts: dict[str, ServicePost] = {}
    for req in requests:
        key = str(req.service_post_id)
        if key not in posts:
            post = services.get_by_id(req.service_post_id)
            if post is not None:
                posts[key] = post

    embedded = attach_summaries(
        requests, profiles.get_many, client="client_id", freelancer="freelancer_id"
    )
    return [
        r.model_copy(update={"service_post": posts.get(str(r.service_post_id))})
        for r in embedded
    ]


def run_list_service_requests(
    inp: ListServiceRequestsInput,
    repo: ServiceRequestRepoPort,
    services: ServiceLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ServiceRequestListOutput:
    """Requests on one service; visible to its freelancer."""
    service = services.get_by_id(inp.service_post_id)
    if service is None:
        return ServiceRequestListOutput(
            requests=[], total=0, success=False, error=not_found("Service", inp.service_post_id)
        )
    if not policy.can_manage(inp.actor, "service_requests:review", service.freelancer_id):
        return ServiceRequestListOutput(requests=[], total=0, success=False, error=forbidden())

    requests = _embed(repo.list_by_service(service.id), services, profiles)
    return ServiceRequestListOutput(requests=requests, total=len(requests))


def _list_for_party(
    inp: ListPartyRequestsInput,
    fetch: Callable[[str], list[ServiceRequest]],
    services: ServiceLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ServiceRequestListOutput:
    if not policy.can_view_admin(inp.actor) and not policy.is_party(inp.actor, inp.party_id):
        return ServiceRequestListOutput(requests=[], total=0, success=False, error=forbidden())
    requests = _embed(fetch(str(inp.party_id)), services, profiles)
    return ServiceRequestListOutput(requests=requests, total=len(requests))


def run_list_freelancer_requests(
    inp: ListPartyRequestsInput,
    repo: ServiceRequestRepoPort,
    services: ServiceLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ServiceRequestListOutput:
    return _list_for_party(inp, repo.list_by_freelancer, services, profiles, policy)


def run_list_client_requests(
    inp: ListPartyRequestsInput,
    repo: ServiceRequestRepoPort,
    services: ServiceLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ServiceRequestListOutput:
    return _list_for_party(inp, repo.list_by_client, services, profiles, policy)


def run_create_service_request(
    inp: CreateServiceRequestInput,
    repo: ServiceRequestRepoPort,
    services: ServiceLookupPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ServiceRequestOutput:
    actor = inp.actor
    if actor is None or actor.profile_id is None or not policy.check_permission(
        actor, "service_requests:create"
    ):
        return ServiceRequestOutput(
            request=None, success=False, error=forbidden("Client access required")
        )

    service = services.get_by_id(inp.service_post_id)
    if service is None:
        return ServiceRequestOutput(
            request=None, success=False, error=not_found("Service", inp.service_post_id)
        )
    if service.status != "active":
        return ServiceRequestOutput(
            request=None, success=False, error=invalid(SERVICE_UNAVAILABLE)
        )
    if str(service.freelancer_id) == actor.profile_id:
        return ServiceRequestOutput(
            request=None, success=False, error=invalid("You cannot request your own service")
        )
    if inp.budget is not None and inp.budget < 0:
        return ServiceRequestOutput(
            request=None, success=False, error=invalid("Budget cannot be negative", field="budget")
        )

    if repo.get_by_service_and_client(service.id, actor.profile_id) is not None:
        return ServiceRequestOutput(
            request=None, success=False, error=duplicate(ALREADY_REQUESTED)
        )

    now = time.now_utc()
    request = ServiceRequest(
        service_post_id=service.id,
        client_id=actor.profile_id,
        freelancer_id=service.freelancer_id,
        message=inp.message.strip(),
        budget=inp.budget,
        status="pending",
        created_at=now,
        updated_at=now,
    )
    repo.save(request)
    logger.info("Service request %s on service %s", request.id, service.id)
    return ServiceRequestOutput(request=request, success=True)


def run_update_service_request_status(
    inp: UpdateServiceRequestStatusInput,
    repo: ServiceRequestRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> ServiceRequestOutput:
    request = repo.get_by_id(inp.request_id)
    if request is None:
        return ServiceRequestOutput(
            request=None, success=False, error=not_found("Service request", inp.request_id)
        )
    if inp.status not in TRANSITIONS:
        return ServiceRequestOutput(
            request=None,
            success=False,
            error=invalid(f"Cannot set status to {inp.status}", field="status"),
        )

    if inp.status == "withdrawn":
        allowed = policy.is_party(inp.actor, request.client_id)
    else:
        allowed = policy.can_manage(inp.actor, "service_requests:review", request.freelancer_id)
    if not allowed:
        return ServiceRequestOutput(request=None, success=False, error=forbidden())

    if request.status not in TRANSITIONS[inp.status]:
        return ServiceRequestOutput(
            request=None,
            success=False,
            error=invalid(f"Request is already {request.status}", field="status"),
        )

    updated = request.model_copy(update={"status": inp.status, "updated_at": time.now_utc()})
    repo.save(updated)
    logger.info("Service request %s -> %s", updated.id, inp.status)
    return ServiceRequestOutput(request=updated, success=True)


def run_accept_service_request(
    inp: GetServiceRequestInput, repo: ServiceRequestRepoPort, policy: PolicyEngine, time: TimePort
) -> ServiceRequestOutput:
    return run_update_service_request_status(
        UpdateServiceRequestStatusInput(inp.actor, inp.request_id, "accepted"), repo, policy, time
    )


def run_reject_service_request(
    inp: GetServiceRequestInput, repo: ServiceRequestRepoPort, policy: PolicyEngine, time: TimePort
) -> ServiceRequestOutput:
    return run_update_service_request_status(
        UpdateServiceRequestStatusInput(inp.actor, inp.request_id, "rejected"), repo, policy, time
    )


def run_withdraw_service_request(
    inp: GetServiceRequestInput, repo: ServiceRequestRepoPort, policy: PolicyEngine, time: TimePort
) -> ServiceRequestOutput:
    return run_update_service_request_status(
        UpdateServiceRequestStatusInput(inp.actor, inp.request_id, "withdrawn"), repo, policy, time
    )


def run_get_service_request(
    inp: GetServiceRequestInput,
    repo: ServiceRequestRepoPort,
    services: ServiceLookupPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> ServiceRequestOutput:
    request = repo.get_by_id(inp.request_id)
    if request is None:
        return ServiceRequestOutput(
            request=None, success=False, error=not_found("Service request", inp.request_id)
        )
    if not policy.can_view_admin(inp.actor) and not policy.is_party(
        inp.actor, request.client_id, request.freelancer_id
    ):
        return ServiceRequestOutput(request=None, success=False, error=forbidden())
    return ServiceRequestOutput(request=_embed([request], services, profiles)[0], success=True)


def run_check_service_request(
    inp: CheckServiceRequestInput, repo: ServiceRequestRepoPort
) -> ServiceRequestCheckOutput:
    request = repo.get_by_service_and_client(inp.service_post_id, inp.client_id)
    if request is None:
        return ServiceRequestCheckOutput(exists=False)
    return ServiceRequestCheckOutput(exists=True, request_id=request.id, status=request.status)
