from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from pumpwork.adapters.solana_rpc import StaticBalanceSource
from pumpwork.adapters.sqlite.repos import SQLiteProfileRepo
from pumpwork.api.deps import get_balance_source, get_settings, reset_singletons
from pumpwork.api.main import app


@pytest.fixture
def api_env(tmp_path, monkeypatch) -> Iterator[str]:
    """Point the app at a fresh data directory."""
    monkeypatch.setenv("PUMPWORK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("PUMPWORK_RULES_PATH", raising=False)
    reset_singletons()
    yield str(tmp_path / "data")
    reset_singletons()


@pytest.fixture
def balances() -> StaticBalanceSource:
    """On-chain balances seen by the API, keyed by wallet address."""
    return StaticBalanceSource()


@pytest.fixture
def client(api_env, balances) -> Iterator[TestClient]:
    app.dependency_overrides[get_balance_source] = lambda: balances
    # Entering the client runs the lifespan: rules, ops checks, migrations.
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_profiles(client) -> SQLiteProfileRepo:
    return SQLiteProfileRepo(get_settings().db_path)


@pytest.fixture
def register(client, balances) -> Callable[..., dict[str, Any]]:
    """
    Sign up a user, link a wallet holding ``balance`` tokens and record it.

    Returns the sign-up session plus ``headers`` and ``profile_id``.
    """
    counter = iter(range(1, 1000))

    def _register(
        nickname: str, user_type: str = "client", balance: float = 20_000
    ) -> dict[str, Any]:
        n = next(counter)
        wallet = f"Wallet{nickname}{n}xxxxxxxxxxxxxxxxxxxx"
        balances.balances[wallet] = balance
        response = client.post(
            "/api/auth/signup",
            json={
                "email": f"{nickname}{n}@example.com",
                "password": "hunter22",
                "nickname": nickname,
                "user_type": user_type,
                "wallet_address": wallet,
            },
        )
        assert response.status_code == 201, response.text
        session = response.json()["session"]
        headers = {"Authorization": f"Bearer {session['access_token']}"}

        refreshed = client.post("/api/profiles/me/balance", headers=headers)
        assert refreshed.status_code == 200, refreshed.text

        # Bearer auth only; drop the cookie set by sign up.
        client.cookies.clear()
        return {
            **session,
            "headers": headers,
            "profile_id": session["user_id"],
            "email": f"{nickname}{n}@example.com",
            "wallet": wallet,
        }

    return _register


@pytest.fixture
def make_admin(api_profiles) -> Callable[[dict[str, Any]], None]:
    def _promote(user: dict[str, Any]) -> None:
        api_profiles.update_fields(user["profile_id"], {"user_type": "admin"})

    return _promote
