from datetime import UTC, datetime, timedelta

import pytest

from pumpwork.adapters.auth.crypto import JWTAuthAdapter
from pumpwork.adapters.auth.session_store import InMemorySessionStore
from pumpwork.domain.entities import AuthSession, AuthUser


@pytest.fixture
def adapter():
    return JWTAuthAdapter()


def test_password_hashing(adapter):
    hashed = adapter.hash_password("hunter22")
    assert hashed != "hunter22"
    assert adapter.verify_password("hunter22", hashed)
    assert not adapter.verify_password("hunter23", hashed)


def test_access_tokens(adapter):
    token = adapter.create_token("user-1", ttl_minutes=5)
    assert adapter.validate_token(token) == "user-1"
    # Tokens minted back to back stay distinct
    assert adapter.create_token("user-1", ttl_minutes=5) != token


def test_expired_and_garbage_tokens(adapter):
    expired = adapter.create_token("user-1", ttl_minutes=-1)
    assert adapter.validate_token(expired) is None
    assert adapter.validate_token("not-a-jwt") is None


def test_refresh_tokens_and_hashing(adapter):
    refresh = adapter.create_refresh_token()
    assert refresh != adapter.create_refresh_token()
    assert adapter.hash_token(refresh) == adapter.hash_token(refresh)
    assert len(adapter.hash_token(refresh)) == 64


def _session(user, access, refresh):
    return AuthSession(
        access_token=access,
        refresh_token=refresh,
        user=user,
        expires_at=datetime.now(UTC) + timedelta(hours=1),
    )


class TestSessionStore:
    def test_save_and_lookup(self):
        store = InMemorySessionStore()
        user = AuthUser(email="a@example.com", password_hash="x")
        store.save(_session(user, "a1", "r1"))
        assert store.get("a1").user.email == "a@example.com"
        assert store.get_by_refresh("r1").access_token == "a1"
        assert store.get("missing") is None
        assert store.get_by_refresh("missing") is None

    def test_delete_drops_refresh_index(self):
        store = InMemorySessionStore()
        user = AuthUser(email="a@example.com", password_hash="x")
        store.save(_session(user, "a1", "r1"))
        store.delete("a1")
        assert store.get("a1") is None
        assert store.get_by_refresh("r1") is None
        store.delete("a1")

    def test_delete_by_user(self):
        store = InMemorySessionStore()
        alice = AuthUser(email="a@example.com", password_hash="x")
        bob = AuthUser(email="b@example.com", password_hash="x")
        store.save(_session(alice, "a1", "r1"))
        store.save(_session(alice, "a2", "r2"))
        store.save(_session(bob, "b1", "r3"))

        assert store.delete_by_user(alice.id) == 2
        assert store.get("a2") is None
        assert store.get("b1") is not None

        store.clear()
        assert store.get("b1") is None
