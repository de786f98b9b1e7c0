"""
Contracts component unit tests.
"""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from pumpwork.adapters.sqlite.repos import (
    SQLiteContractRepo,
    SQLiteJobPostRepo,
    SQLiteServicePostRepo,
)
from pumpwork.components.contracts import (
    ContractActionInput,
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
from pumpwork.domain.entities import JobPost, ServicePost
from pumpwork.domain.errors import FORBIDDEN, INVALID, NOT_FOUND


@pytest.fixture
def repo(db_path, hub) -> SQLiteContractRepo:
    return SQLiteContractRepo(db_path, feed=hub)


@pytest.fixture
def jobs(db_path, hub) -> SQLiteJobPostRepo:
    return SQLiteJobPostRepo(db_path, feed=hub)


@pytest.fixture
def services(db_path, hub) -> SQLiteServicePostRepo:
    return SQLiteServicePostRepo(db_path, feed=hub)


@pytest.fixture
def people(make_profile, identity_of):
    return {
        "client": identity_of(make_profile("client", user_type="client")),
        "dev": identity_of(make_profile("dev", user_type="freelancer")),
        "stranger": identity_of(make_profile("stranger", user_type="client")),
        "admin": identity_of(make_profile("root", user_type="admin")),
    }


@pytest.fixture
def hire(repo, profile_repo, jobs, services, policy, clock, people):
    def _hire(who: str = "client", **kwargs):
        kwargs.setdefault("freelancer_id", people["dev"].profile_id)
        kwargs.setdefault("title", "Token launch page")
        kwargs.setdefault("agreed_amount", 4)
        return run_create_contract(
            CreateContractInput(actor=people[who], **kwargs),
            repo,
            profile_repo,
            jobs,
            services,
            policy,
            clock,
        )

    return _hire


def _action(person, contract):
    return ContractActionInput(actor=person, contract_id=contract.id)


class TestCreate:
    def test_create(self, hire, people, clock) -> None:
        result = hire(title="  Token launch page ", escrow_amount=2)
        assert result.success
        contract = result.contract
        assert contract.status == "active"
        assert contract.title == "Token launch page"
        assert str(contract.client_id) == people["client"].profile_id
        assert contract.escrow_amount == 2
        assert contract.created_at == clock.now_utc()

    def test_freelancer_cannot_hire(self, hire) -> None:
        assert hire("dev").error.code == FORBIDDEN

    def test_cannot_hire_self(self, hire, people) -> None:
        result = hire(freelancer_id=people["client"].profile_id)
        assert result.error.field == "freelancer_id"

    def test_unknown_freelancer(self, hire) -> None:
        assert hire(freelancer_id=uuid4()).error.code == NOT_FOUND

    def test_validation(self, hire) -> None:
        assert hire(title=" ").error.field == "title"
        assert hire(agreed_amount=-1).error.field == "agreed_amount"
        assert hire(escrow_amount=-1).error.field == "escrow_amount"

    def test_job_must_be_own(self, hire, jobs, people) -> None:
        mine = jobs.save(JobPost(client_id=people["client"].profile_id, title="A", description="a"))
        theirs = jobs.save(
            JobPost(client_id=people["stranger"].profile_id, title="B", description="b")
        )
        assert hire(job_post_id=mine.id).success
        assert hire(job_post_id=theirs.id).error.code == FORBIDDEN

    def test_service_must_belong_to_freelancer(self, hire, services, people) -> None:
        theirs = services.save(
            ServicePost(freelancer_id=people["dev"].profile_id, title="S", description="s")
        )
        assert hire(service_post_id=theirs.id).success

        other = services.save(
            ServicePost(freelancer_id=people["stranger"].profile_id, title="T", description="t")
        )
        assert hire(service_post_id=other.id).error.field == "service_post_id"


class TestDelivery:
    def test_submit_revise_approve(self, hire, repo, policy, clock, people) -> None:
        contract = hire(description="Original brief").contract

        clock.advance(hours=1)
        submitted = run_submit_work(
            SubmitWorkInput(actor=people["dev"], contract_id=contract.id, notes=" v1 delivered "),
            repo,
            policy,
            clock,
        )
        assert submitted.contract.status == "submitted"
        assert submitted.contract.description == "v1 delivered"
        assert submitted.contract.submitted_at == clock.now_utc()

        revised = run_request_revisions(
            RequestRevisionsInput(
                actor=people["client"], contract_id=contract.id, notes="Fix logo"
            ),
            repo,
            policy,
            clock,
        )
        assert revised.contract.status == "active"
        assert revised.contract.revision_notes == "Fix logo"
        assert revised.contract.revision_count == 1

        run_submit_work(
            SubmitWorkInput(actor=people["dev"], contract_id=contract.id), repo, policy, clock
        )
        clock.advance(days=1)
        approved = run_approve_work(_action(people["client"], contract), repo, policy, clock)
        assert approved.contract.status == "completed"
        assert approved.contract.completed_at == clock.now_utc()

        stored = repo.get_by_id(contract.id)
        assert stored.status == "completed"
        assert stored.revision_count == 1
        # second submission kept the previous description
        assert stored.description == "v1 delivered"

    def test_only_freelancer_submits(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        result = run_submit_work(
            SubmitWorkInput(actor=people["client"], contract_id=contract.id), repo, policy, clock
        )
        assert result.error.code == FORBIDDEN

    def test_approve_requires_submission(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        result = run_approve_work(_action(people["client"], contract), repo, policy, clock)
        assert result.error.code == INVALID

    def test_revision_notes_required(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        run_submit_work(
            SubmitWorkInput(actor=people["dev"], contract_id=contract.id), repo, policy, clock
        )
        result = run_request_revisions(
            RequestRevisionsInput(actor=people["client"], contract_id=contract.id, notes="  "),
            repo,
            policy,
            clock,
        )
        assert result.error.field == "notes"

    def test_freelancer_cannot_approve(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        run_submit_work(
            SubmitWorkInput(actor=people["dev"], contract_id=contract.id), repo, policy, clock
        )
        result = run_approve_work(_action(people["dev"], contract), repo, policy, clock)
        assert result.error.code == FORBIDDEN


class TestStatus:
    def test_either_party_cancels(self, hire, repo, policy, clock, people) -> None:
        first = hire().contract
        second = hire().contract
        assert run_cancel_contract(_action(people["dev"], first), repo, policy, clock).success
        assert run_cancel_contract(_action(people["client"], second), repo, policy, clock).success

    def test_stranger_cannot_cancel(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        result = run_cancel_contract(_action(people["stranger"], contract), repo, policy, clock)
        assert result.error.code == FORBIDDEN

    def test_final_contracts_are_frozen(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        run_complete_contract(_action(people["client"], contract), repo, policy, clock)
        again = run_cancel_contract(_action(people["client"], contract), repo, policy, clock)
        assert again.error.code == INVALID

        direct = run_update_contract_status(
            UpdateContractStatusInput(
                actor=people["admin"], contract_id=contract.id, status="active"
            ),
            repo,
            policy,
            clock,
        )
        assert direct.error.field == "status"

    def test_update_status_stamps_completion(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        clock.advance(minutes=5)
        result = run_update_contract_status(
            UpdateContractStatusInput(
                actor=people["client"], contract_id=contract.id, status="completed"
            ),
            repo,
            policy,
            clock,
        )
        assert result.contract.completed_at == contract.created_at + timedelta(minutes=5)

    def test_unknown_status(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        result = run_update_contract_status(
            UpdateContractStatusInput(
                actor=people["client"],
                contract_id=contract.id,
                status="paid",  # type: ignore[arg-type]
            ),
            repo,
            policy,
            clock,
        )
        assert result.error.code == INVALID

    def test_escrow(self, hire, repo, policy, clock, people) -> None:
        contract = hire().contract
        funded = run_update_escrow(
            UpdateEscrowInput(actor=people["client"], contract_id=contract.id, amount=4),
            repo,
            policy,
            clock,
        )
        assert funded.contract.escrow_amount == 4

        negative = run_update_escrow(
            UpdateEscrowInput(actor=people["client"], contract_id=contract.id, amount=-1),
            repo,
            policy,
            clock,
        )
        assert negative.error.field == "amount"

        by_freelancer = run_update_escrow(
            UpdateEscrowInput(actor=people["dev"], contract_id=contract.id, amount=0),
            repo,
            policy,
            clock,
        )
        assert by_freelancer.error.code == FORBIDDEN


class TestQueries:
    def test_lists_by_party(self, hire, repo, profile_repo, policy, clock, people) -> None:
        first = hire().contract
        hire()
        run_cancel_contract(_action(people["client"], first), repo, policy, clock)

        as_client = run_list_client_contracts(
            ListContractsInput(actor=people["client"], party_id=people["client"].profile_id),
            repo,
            profile_repo,
            policy,
        )
        assert as_client.total == 2
        assert all(c.freelancer.nickname == "dev" for c in as_client.contracts)

        active = run_list_freelancer_contracts(
            ListContractsInput(
                actor=people["dev"], party_id=people["dev"].profile_id, status="active"
            ),
            repo,
            profile_repo,
            policy,
        )
        assert active.total == 1
        assert active.contracts[0].client.nickname == "client"

        snooping = run_list_client_contracts(
            ListContractsInput(actor=people["stranger"], party_id=people["client"].profile_id),
            repo,
            profile_repo,
            policy,
        )
        assert snooping.error.code == FORBIDDEN

    def test_get_contract(self, hire, repo, profile_repo, policy, people) -> None:
        contract = hire().contract
        for who in ("client", "dev", "admin"):
            result = run_get_contract(_action(people[who], contract), repo, profile_repo, policy)
            assert result.success

        hidden = run_get_contract(_action(people["stranger"], contract), repo, profile_repo, policy)
        assert hidden.error.code == FORBIDDEN

        missing = run_get_contract(
            ContractActionInput(actor=people["client"], contract_id=uuid4()),
            repo,
            profile_repo,
            policy,
        )
        assert missing.error.code == NOT_FOUND
