"""Admin dashboard API tests."""

import pytest


@pytest.fixture
def admin(register, make_admin):
    user = register("root", user_type="client")
    make_admin(user)
    return user


@pytest.fixture
def marketplace(client, register):
    carol = register("carol", user_type="client")
    dave = register("dave", user_type="freelancer")
    job = client.post(
        "/api/jobs", json={"title": "Bot", "description": "Fast"}, headers=carol["headers"]
    ).json()
    client.post(f"/api/jobs/{job['id']}/applications", json={}, headers=dave["headers"])
    client.post(
        "/api/services",
        json={"title": "Audit", "description": "Anchor programs"},
        headers=dave["headers"],
    )
    return {"carol": carol, "dave": dave, "job": job}


def test_stats(client, admin, marketplace):
    response = client.get("/api/admin/stats", headers=admin["headers"])
    assert response.status_code == 200
    stats = response.json()
    assert stats["users"] == {"total": 3, "clients": 1, "freelancers": 1, "admins": 1}
    assert stats["jobs"]["open"] == 1
    assert stats["services"]["active"] == 1
    assert stats["applications"]["pending"] == 1
    assert stats["reviews"] == {"total": 0, "averageRating": 0}


def test_stats_admin_only(client, marketplace):
    headers = marketplace["carol"]["headers"]
    assert client.get("/api/admin/stats", headers=headers).status_code == 403
    assert client.get("/api/admin/stats").status_code == 401


def test_recent_activity(client, admin, marketplace):
    body = client.get(
        "/api/admin/activity", params={"limit": 2}, headers=admin["headers"]
    ).json()
    assert len(body["recent_users"]) == 2
    assert body["recent_jobs"][0]["client"]["nickname"] == "carol"
    assert body["recent_contracts"] == []


def test_list_users(client, admin, marketplace):
    body = client.get("/api/admin/users", headers=admin["headers"]).json()
    assert body["total"] == 3
    assert {u["nickname"] for u in body["items"]} == {"root", "carol", "dave"}
