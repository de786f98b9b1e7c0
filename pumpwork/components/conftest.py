"""Fixtures shared by the marketplace component tests."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import pytest

from pumpwork.adapters.clock import FrozenClock
from pumpwork.adapters.realtime import RealtimeHub
from pumpwork.adapters.sqlite.migrator import SQLiteMigrator
from pumpwork.adapters.sqlite.repos import SQLiteProfileRepo
from pumpwork.domain.access import Identity, compute_identity
from pumpwork.domain.entities import Profile
from pumpwork.domain.policy import PolicyEngine
from pumpwork.rules.loader import load_rules
from pumpwork.rules.models import Rules


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "pumpwork.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def hub() -> RealtimeHub:
    return RealtimeHub()


@pytest.fixture
def market_rules() -> Rules:
    return load_rules()


@pytest.fixture
def policy(market_rules: Rules) -> PolicyEngine:
    return PolicyEngine(market_rules)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def profile_repo(db_path: str, hub: RealtimeHub) -> SQLiteProfileRepo:
    return SQLiteProfileRepo(db_path, feed=hub)


@pytest.fixture
def make_profile(profile_repo: SQLiteProfileRepo) -> Callable[..., Profile]:
    """Persist a profile; balances default to freelancer level."""

    def _make(nickname: str = "user", user_type: str = "client", **extra: Any) -> Profile:
        extra.setdefault("token_balance", 20_000)
        return profile_repo.save(
            Profile(id=uuid4(), nickname=nickname, user_type=user_type, **extra)
        )

    return _make


@pytest.fixture
def identity_of() -> Callable[[Profile], Identity]:
    return lambda profile: compute_identity(None, profile)
