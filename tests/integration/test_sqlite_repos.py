import sqlite3
from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from pumpwork.adapters.realtime import POSTGRES_CHANGES, ChangeFilter, RealtimeHub
from pumpwork.adapters.sqlite.migrator import SQLiteMigrator
from pumpwork.adapters.sqlite.repos import (
    SQLiteAuthUserRepo,
    SQLiteCategoryRepo,
    SQLiteContractRepo,
    SQLiteConversationRepo,
    SQLiteJobPostRepo,
    SQLiteMessageRepo,
    SQLiteProfileRepo,
    SQLiteReviewRepo,
)
from pumpwork.domain.entities import (
    AuthUser,
    Contract,
    Conversation,
    JobPost,
    Message,
    Profile,
    Review,
)


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "repos.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def hub():
    return RealtimeHub()


@pytest.fixture
def changes(hub):
    seen = []
    hub.channel("all").on(POSTGRES_CHANGES, ChangeFilter(), seen.append).subscribe()
    return seen


@pytest.fixture
def profiles(db_path, hub):
    return SQLiteProfileRepo(db_path, feed=hub)


def _profile(nickname, user_type="client", **extra):
    return Profile(id=uuid4(), nickname=nickname, user_type=user_type, **extra)


class TestProfiles:
    def test_save_publishes_insert_then_update(self, profiles, changes):
        alice = profiles.save(_profile("alice", skills=["rust"]))
        profiles.update_fields(alice.id, {"bio": "gm"})

        assert [c.event for c in changes] == ["INSERT", "UPDATE"]
        assert changes[0].table == "profiles"
        assert changes[0].new["skills"] == ["rust"]
        assert changes[1].old["bio"] is None
        assert changes[1].new["bio"] == "gm"

    def test_round_trip(self, profiles):
        alice = profiles.save(_profile("alice", skills=["rust", "anchor"], wallet_address="W1"))
        loaded = profiles.get_by_id(alice.id)
        assert loaded.skills == ["rust", "anchor"]
        assert profiles.get_by_wallet("W1").id == alice.id
        assert profiles.get_by_id(uuid4()) is None

    def test_wallet_is_unique(self, profiles):
        profiles.save(_profile("alice", wallet_address="W1"))
        with pytest.raises(sqlite3.IntegrityError):
            profiles.save(_profile("bob", wallet_address="W1"))

    def test_update_fields_validates(self, profiles):
        alice = profiles.save(_profile("alice"))
        with pytest.raises(ValueError):
            profiles.update_fields(alice.id, {"user_type": "wizard"})
        assert profiles.update_fields(uuid4(), {"bio": "x"}) is None

    def test_list_filters_and_sorting(self, profiles):
        profiles.save(_profile("a", "freelancer", skills=["rust"], rating=4.5))
        profiles.save(_profile("b", "freelancer", skills=["design"], rating=3.0))
        profiles.save(_profile("c", "client"))

        assert {p.nickname for p in profiles.list(user_type="freelancer")} == {"a", "b"}
        assert [p.nickname for p in profiles.list(skills=["rust"])] == ["a"]
        assert [p.nickname for p in profiles.list(min_rating=4)] == ["a"]
        ordered = profiles.list(user_type="freelancer", sort_by="rating", sort_order="asc")
        assert [p.nickname for p in ordered] == ["b", "a"]
        with pytest.raises(ValueError):
            profiles.list(sort_by="email")

    def test_get_many_count_by_and_recent(self, profiles):
        a = profiles.save(_profile("a", "freelancer"))
        b = profiles.save(_profile("b"))
        profiles.save(_profile("c"))

        found = profiles.get_many([a.id, b.id, None])
        assert set(found) == {str(a.id), str(b.id)}
        assert profiles.get_many([]) == {}
        assert profiles.count_by("user_type") == {"client": 2, "freelancer": 1}
        assert profiles.count(user_type="client") == 2
        assert len(profiles.recent(limit=2)) == 2
        with pytest.raises(ValueError):
            profiles.count_by("no_such_column")

    def test_recompute_rating(self, db_path, profiles):
        client = profiles.save(_profile("client"))
        dev = profiles.save(_profile("dev", "freelancer"))
        contracts = SQLiteContractRepo(db_path)
        reviews = SQLiteReviewRepo(db_path)
        for rating in (5, 4, 4):
            contract = contracts.save(
                Contract(client_id=client.id, freelancer_id=dev.id, title="gig")
            )
            reviews.save(
                Review(
                    contract_id=contract.id,
                    reviewer_id=client.id,
                    reviewee_id=dev.id,
                    rating=rating,
                )
            )

        updated = profiles.recompute_rating(dev.id)
        assert updated.rating == 4.33
        assert updated.review_count == 3
        assert reviews.average_rating() == 4.33

        fresh = profiles.recompute_rating(client.id)
        assert fresh.rating == 0
        assert fresh.review_count == 0


class TestOtherRepos:
    def test_auth_user_lookup_is_case_insensitive(self, db_path):
        users = SQLiteAuthUserRepo(db_path)
        user = users.save(
            AuthUser(email="Alice@Example.com", password_hash="x", user_metadata={"k": 1})
        )
        loaded = users.get_by_email("alice@example.com")
        assert loaded.id == user.id
        assert loaded.user_metadata == {"k": 1}

    def test_auth_user_writes_are_not_broadcast(self, db_path, hub, changes):
        users = SQLiteAuthUserRepo(db_path, feed=hub)
        user = users.save(AuthUser(email="alice@example.com", password_hash="secret-hash"))
        users.save(user.model_copy(update={"email_confirmed_at": datetime.now(UTC)}))

        assert users.get_by_email("alice@example.com").password_hash == "secret-hash"
        assert changes == []

    def test_categories(self, db_path):
        categories = SQLiteCategoryRepo(db_path)
        names = [c.name for c in categories.list_all()]
        assert names == sorted(names)
        assert categories.get_by_slug("design").name == "Design"
        assert categories.get_by_slug("nope") is None

    def test_job_search_and_delete(self, db_path, profiles, hub, changes):
        client = profiles.save(_profile("client"))
        jobs = SQLiteJobPostRepo(db_path, feed=hub)
        bot = jobs.save(
            JobPost(client_id=client.id, title="Raydium bot", description="MEV", budget=50)
        )
        jobs.save(
            JobPost(client_id=client.id, title="Logo", description="100% vector", budget=5)
        )

        assert [j.title for j in jobs.list(["open"], search="raydium")] == ["Raydium bot"]
        assert [j.title for j in jobs.list(["open"], search="100%")] == ["Logo"]
        assert [j.title for j in jobs.list(["open"], budget_min=10)] == ["Raydium bot"]
        assert jobs.list(["completed"]) == []
        assert len(jobs.list_by_client(client.id)) == 2

        assert jobs.delete(bot.id) is True
        assert jobs.delete(bot.id) is False
        assert changes[-1].event == "DELETE"
        assert changes[-1].old["title"] == "Raydium bot"


class TestMessages:
    @pytest.fixture
    def conversation(self, db_path, profiles):
        alice = profiles.save(_profile("alice"))
        bob = profiles.save(_profile("bob", "freelancer"))
        return SQLiteConversationRepo(db_path).save(
            Conversation(participant_1_id=alice.id, participant_2_id=bob.id)
        )

    @pytest.fixture
    def messages(self, db_path):
        return SQLiteMessageRepo(db_path)

    def _send(self, messages, conversation, content, at):
        return messages.save(
            Message(
                conversation_id=conversation.id,
                sender_id=conversation.participant_1_id,
                content=content,
                created_at=at,
            )
        )

    def test_before_cursor_handles_fractional_seconds(self, messages, conversation):
        noon = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        self._send(messages, conversation, "early", noon - timedelta(seconds=1))
        self._send(messages, conversation, "late", noon + timedelta(milliseconds=500))

        before_noon = messages.list_by_conversation(conversation.id, before=noon)
        assert [m.content for m in before_noon] == ["early"]
        everything = messages.list_by_conversation(conversation.id)
        assert [m.content for m in everything] == ["early", "late"]

    def test_before_cursor_with_utc_offset(self, messages, conversation):
        noon = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        self._send(messages, conversation, "morning", noon - timedelta(hours=1))
        self._send(messages, conversation, "afternoon", noon + timedelta(hours=1))

        cursor = datetime(2025, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        got = messages.list_by_conversation(conversation.id, before=cursor)
        assert [m.content for m in got] == ["morning"]

    def test_stored_timestamps_read_back_as_utc(self, messages, conversation):
        local = datetime(2025, 1, 1, 14, 0, 0, 250000, tzinfo=timezone(timedelta(hours=2)))
        saved = self._send(messages, conversation, "hi", local)

        loaded = messages.get_by_id(saved.id)
        assert loaded.created_at == local
        assert loaded.created_at.utcoffset() == timedelta(0)
