"""
Jobs component unit tests.

Tests for posting, browsing filters and owner-only edits.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from pumpwork.adapters.realtime import POSTGRES_CHANGES, ChangeFilter
from pumpwork.adapters.sqlite.repos import SQLiteJobPostRepo
from pumpwork.components.jobs import (
    CreateJobInput,
    DeleteJobInput,
    GetJobInput,
    ListClientJobsInput,
    ListJobsInput,
    UpdateJobInput,
    run_create_job,
    run_delete_job,
    run_get_job,
    run_list_client_jobs,
    run_list_jobs,
    run_update_job,
)
from pumpwork.domain.errors import FORBIDDEN, INVALID, NOT_FOUND


@pytest.fixture
def repo(db_path, hub) -> SQLiteJobPostRepo:
    return SQLiteJobPostRepo(db_path, feed=hub)


@pytest.fixture
def client(make_profile):
    return make_profile("acme", user_type="client")


@pytest.fixture
def post(repo, policy, clock, identity_of, client):
    def _post(title: str = "Build a trading bot", **kwargs):
        inp = CreateJobInput(
            actor=identity_of(client),
            title=title,
            description=kwargs.pop("description", "Solana sniper bot"),
            **kwargs,
        )
        result = run_create_job(inp, repo, policy, clock)
        assert result.success, result.error
        clock.advance(seconds=1)
        return result.job

    return _post


class TestCreateJob:
    def test_create_job_starts_open(self, post, client) -> None:
        job = post(budget=5, skills=["rust", " rust ", ""])
        assert job.status == "open"
        assert str(job.client_id) == str(client.id)
        assert job.skills == ["rust"]

    def test_requires_client_role(
        self, repo, policy, clock, identity_of, make_profile
    ) -> None:
        dev = make_profile("dev", user_type="freelancer")
        result = run_create_job(
            CreateJobInput(actor=identity_of(dev), title="T", description="D"),
            repo,
            policy,
            clock,
        )
        assert result.error.code == FORBIDDEN

    def test_requires_token_balance(
        self, repo, policy, clock, identity_of, make_profile
    ) -> None:
        broke = make_profile("broke", user_type="client", token_balance=500)
        result = run_create_job(
            CreateJobInput(actor=identity_of(broke), title="T", description="D"),
            repo,
            policy,
            clock,
        )
        assert result.error.code == FORBIDDEN

    def test_anonymous_rejected(self, repo, policy, clock) -> None:
        result = run_create_job(
            CreateJobInput(actor=None, title="T", description="D"), repo, policy, clock
        )
        assert not result.success

    @pytest.mark.parametrize(
        "title,description,budget,field",
        [
            ("", "D", 1, "title"),
            ("T", "   ", 1, "description"),
            ("T", "D", -1, "budget"),
            ("x" * 201, "D", 1, "title"),
        ],
    )
    def test_validation(
        self, repo, policy, clock, identity_of, client, title, description, budget, field
    ) -> None:
        result = run_create_job(
            CreateJobInput(
                actor=identity_of(client), title=title, description=description, budget=budget
            ),
            repo,
            policy,
            clock,
        )
        assert result.error.code == INVALID
        assert result.error.field == field


class TestListJobs:
    def test_defaults_to_open_and_in_progress(self, post, repo, profile_repo) -> None:
        post("open job")
        post("running job", description="d")
        done = post("done job")
        running = repo.list(["open"], search="running")[0]
        repo.save(running.model_copy(update={"status": "in_progress"}))
        repo.save(done.model_copy(update={"status": "completed"}))

        result = run_list_jobs(ListJobsInput(), repo, profile_repo)
        assert {j.title for j in result.jobs} == {"open job", "running job"}

        completed = run_list_jobs(ListJobsInput(status="completed"), repo, profile_repo)
        assert [j.title for j in completed.jobs] == ["done job"]

    def test_filters(self, post, repo, profile_repo) -> None:
        post("Rust audit", category="auditing", skills=["rust"], budget=40)
        post("Logo design", category="design", skills=["figma"], budget=5)
        post("Anchor dev", category="development", skills=["rust", "anchor"], budget=100)

        by_skill = run_list_jobs(ListJobsInput(skills=["rust"]), repo, profile_repo)
        assert {j.title for j in by_skill.jobs} == {"Rust audit", "Anchor dev"}

        by_budget = run_list_jobs(
            ListJobsInput(budget_min=10, budget_max=50), repo, profile_repo
        )
        assert [j.title for j in by_budget.jobs] == ["Rust audit"]

        by_category = run_list_jobs(ListJobsInput(category="design"), repo, profile_repo)
        assert [j.title for j in by_category.jobs] == ["Logo design"]

    def test_search_is_case_insensitive(self, post, repo, profile_repo) -> None:
        post("NFT Mint Page", description="landing page")
        post("Telegram bot", description="Needs an nft gallery command")
        post("Whitepaper", description="tokenomics")

        result = run_list_jobs(ListJobsInput(search="nft"), repo, profile_repo)
        assert {j.title for j in result.jobs} == {"NFT Mint Page", "Telegram bot"}

    def test_search_treats_wildcards_literally(self, post, repo, profile_repo) -> None:
        post("100% on-chain")
        post("Other")
        result = run_list_jobs(ListJobsInput(search="%"), repo, profile_repo)
        assert [j.title for j in result.jobs] == ["100% on-chain"]

    def test_sorting(self, post, repo, profile_repo) -> None:
        post("cheap", budget=1)
        post("pricey", budget=99)
        newest_first = run_list_jobs(ListJobsInput(), repo, profile_repo)
        assert [j.title for j in newest_first.jobs] == ["pricey", "cheap"]

        by_budget = run_list_jobs(
            ListJobsInput(sort_by="budget", sort_order="asc"), repo, profile_repo
        )
        assert [j.title for j in by_budget.jobs] == ["cheap", "pricey"]

        bogus = run_list_jobs(ListJobsInput(sort_by="id; DROP TABLE"), repo, profile_repo)
        assert bogus.total == 2

    def test_embeds_client_summary(self, post, repo, profile_repo) -> None:
        post()
        job = run_list_jobs(ListJobsInput(), repo, profile_repo).jobs[0]
        assert job.client.nickname == "acme"


class TestGetAndOwnership:
    def test_get_job(self, post, repo, profile_repo) -> None:
        job = post()
        result = run_get_job(GetJobInput(job_id=job.id), repo, profile_repo)
        assert result.job.title == job.title
        assert result.job.client.nickname == "acme"

    def test_get_missing(self, repo, profile_repo) -> None:
        result = run_get_job(GetJobInput(job_id=uuid4()), repo, profile_repo)
        assert result.error.code == NOT_FOUND

    def test_list_client_jobs_includes_closed(self, post, repo, profile_repo, client) -> None:
        job = post()
        repo.save(job.model_copy(update={"status": "cancelled"}))
        result = run_list_client_jobs(ListClientJobsInput(client_id=client.id), repo, profile_repo)
        assert result.total == 1

    def test_owner_updates(self, post, repo, policy, clock, identity_of, client) -> None:
        job = post()
        result = run_update_job(
            UpdateJobInput(
                actor=identity_of(client), job_id=job.id, budget=12, status="in_progress"
            ),
            repo,
            policy,
            clock,
        )
        assert result.success
        stored = repo.get_by_id(job.id)
        assert stored.budget == 12
        assert stored.status == "in_progress"
        assert stored.updated_at > job.updated_at

    def test_empty_update(self, post, repo, policy, clock, identity_of, client) -> None:
        job = post()
        result = run_update_job(
            UpdateJobInput(actor=identity_of(client), job_id=job.id), repo, policy, clock
        )
        assert result.error.code == INVALID

    def test_stranger_cannot_update_or_delete(
        self, post, repo, policy, clock, identity_of, make_profile
    ) -> None:
        job = post()
        other = identity_of(make_profile("other", user_type="client"))
        update = run_update_job(
            UpdateJobInput(actor=other, job_id=job.id, title="mine now"), repo, policy, clock
        )
        assert update.error.code == FORBIDDEN
        delete = run_delete_job(DeleteJobInput(actor=other, job_id=job.id), repo, policy)
        assert delete.error.code == FORBIDDEN
        assert repo.get_by_id(job.id) is not None

    def test_admin_can_delete(self, post, repo, policy, identity_of, make_profile) -> None:
        job = post()
        admin = identity_of(make_profile("root", user_type="admin"))
        result = run_delete_job(DeleteJobInput(actor=admin, job_id=job.id), repo, policy)
        assert result.success
        assert repo.get_by_id(job.id) is None

    def test_delete_publishes_change(self, post, repo, policy, identity_of, client, hub) -> None:
        job = post()
        seen = []
        hub.channel("jobs").on(
            POSTGRES_CHANGES, ChangeFilter(event="DELETE", table="job_posts"), seen.append
        ).subscribe()
        run_delete_job(DeleteJobInput(actor=identity_of(client), job_id=job.id), repo, policy)
        assert [e.old["id"] for e in seen] == [str(job.id)]
