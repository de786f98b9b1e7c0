"""
Service requests component unit tests.
"""

from __future__ import annotations

import pytest

from pumpwork.adapters.sqlite.repos import SQLiteServicePostRepo, SQLiteServiceRequestRepo
from pumpwork.components.service_requests import (
    ALREADY_REQUESTED,
    CheckServiceRequestInput,
    CreateServiceRequestInput,
    GetServiceRequestInput,
    ListPartyRequestsInput,
    ListServiceRequestsInput,
    run_accept_service_request,
    run_check_service_request,
    run_create_service_request,
    run_get_service_request,
    run_list_client_requests,
    run_list_freelancer_requests,
    run_list_service_requests,
    run_reject_service_request,
    run_withdraw_service_request,
)
from pumpwork.domain.entities import ServicePost
from pumpwork.domain.errors import DUPLICATE, FORBIDDEN, INVALID


@pytest.fixture
def services(db_path, hub) -> SQLiteServicePostRepo:
    return SQLiteServicePostRepo(db_path, feed=hub)


@pytest.fixture
def repo(db_path, hub) -> SQLiteServiceRequestRepo:
    return SQLiteServiceRequestRepo(db_path, feed=hub)


@pytest.fixture
def people(make_profile, identity_of):
    return {
        "dev": identity_of(make_profile("dev", user_type="freelancer")),
        "buyer": identity_of(make_profile("buyer", user_type="client")),
        "other_buyer": identity_of(make_profile("other", user_type="client")),
    }


@pytest.fixture
def service(services, people) -> ServicePost:
    return services.save(
        ServicePost(
            freelancer_id=people["dev"].profile_id,
            title="Smart contract audit",
            description="...",
            price=10,
        )
    )


@pytest.fixture
def request_service(repo, services, policy, clock, service, people):
    def _request(who: str = "buyer", **kwargs):
        return run_create_service_request(
            CreateServiceRequestInput(actor=people[who], service_post_id=service.id, **kwargs),
            repo,
            services,
            policy,
            clock,
        )

    return _request


class TestCreate:
    def test_create_links_the_freelancer(self, request_service, people) -> None:
        result = request_service(message=" Need it by Friday ", budget=12)
        assert result.success
        req = result.request
        assert str(req.freelancer_id) == people["dev"].profile_id
        assert req.message == "Need it by Friday"
        assert req.status == "pending"

    def test_one_request_per_client(self, request_service) -> None:
        assert request_service().success
        again = request_service()
        assert again.error.code == DUPLICATE
        assert again.error.message == ALREADY_REQUESTED
        assert request_service("other_buyer").success

    def test_freelancers_cannot_request(self, request_service) -> None:
        assert request_service("dev").error.code == FORBIDDEN

    def test_paused_service(self, request_service, services, service) -> None:
        services.save(service.model_copy(update={"status": "paused"}))
        assert request_service().error.code == INVALID


class TestStatus:
    def test_freelancer_accepts(self, request_service, repo, policy, clock, people) -> None:
        req = request_service().request
        result = run_accept_service_request(
            GetServiceRequestInput(actor=people["dev"], request_id=req.id), repo, policy, clock
        )
        assert result.request.status == "accepted"

    def test_client_cannot_accept(self, request_service, repo, policy, clock, people) -> None:
        req = request_service().request
        result = run_accept_service_request(
            GetServiceRequestInput(actor=people["buyer"], request_id=req.id), repo, policy, clock
        )
        assert result.error.code == FORBIDDEN

    def test_client_withdraws_then_cannot_be_accepted(
        self, request_service, repo, policy, clock, people
    ) -> None:
        req = request_service().request
        withdrawn = run_withdraw_service_request(
            GetServiceRequestInput(actor=people["buyer"], request_id=req.id), repo, policy, clock
        )
        assert withdrawn.request.status == "withdrawn"

        late = run_reject_service_request(
            GetServiceRequestInput(actor=people["dev"], request_id=req.id), repo, policy, clock
        )
        assert late.error.code == INVALID


class TestQueries:
    def test_listings(
        self, request_service, repo, services, profile_repo, policy, people, service
    ) -> None:
        request_service()
        request_service("other_buyer")

        on_service = run_list_service_requests(
            ListServiceRequestsInput(actor=people["dev"], service_post_id=service.id),
            repo,
            services,
            profile_repo,
            policy,
        )
        assert on_service.total == 2
        assert {r.client.nickname for r in on_service.requests} == {"buyer", "other"}
        assert all(r.service_post.title == "Smart contract audit" for r in on_service.requests)

        received = run_list_freelancer_requests(
            ListPartyRequestsInput(actor=people["dev"], party_id=people["dev"].profile_id),
            repo,
            services,
            profile_repo,
            policy,
        )
        assert received.total == 2

        sent = run_list_client_requests(
            ListPartyRequestsInput(actor=people["buyer"], party_id=people["buyer"].profile_id),
            repo,
            services,
            profile_repo,
            policy,
        )
        assert sent.total == 1
        assert sent.requests[0].freelancer.nickname == "dev"

    def test_clients_cannot_list_service_inbox(
        self, request_service, repo, services, profile_repo, policy, people, service
    ) -> None:
        request_service()
        result = run_list_service_requests(
            ListServiceRequestsInput(actor=people["buyer"], service_post_id=service.id),
            repo,
            services,
            profile_repo,
            policy,
        )
        assert result.error.code == FORBIDDEN

    def test_get_and_check(
        self, request_service, repo, services, profile_repo, policy, people, service
    ) -> None:
        req = request_service().request
        got = run_get_service_request(
            GetServiceRequestInput(actor=people["dev"], request_id=req.id),
            repo,
            services,
            profile_repo,
            policy,
        )
        assert got.success
        assert got.request.client.nickname == "buyer"

        hidden = run_get_service_request(
            GetServiceRequestInput(actor=people["other_buyer"], request_id=req.id),
            repo,
            services,
            profile_repo,
            policy,
        )
        assert hidden.error.code == FORBIDDEN

        check = run_check_service_request(
            CheckServiceRequestInput(
                service_post_id=service.id, client_id=people["buyer"].profile_id
            ),
            repo,
        )
        assert check.exists
        assert check.status == "pending"
