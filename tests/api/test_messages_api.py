"""Messaging API tests, including the websocket push of new messages."""

import pytest
from starlette.websockets import WebSocketDisconnect


@pytest.fixture
def pair(register):
    return register("ana", user_type="client"), register("ben", user_type="freelancer")


@pytest.fixture
def conversation(client, pair):
    ana, ben = pair
    response = client.post(
        "/api/messages/conversations",
        json={"other_user_id": ben["profile_id"]},
        headers=ana["headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_conversation_is_reused(client, pair, conversation):
    ana, ben = pair
    again = client.post(
        "/api/messages/conversations",
        json={"other_user_id": ana["profile_id"]},
        headers=ben["headers"],
    )
    assert again.json()["id"] == conversation["id"]


def test_cannot_message_yourself(client, pair):
    ana, _ = pair
    response = client.post(
        "/api/messages/conversations",
        json={"other_user_id": ana["profile_id"]},
        headers=ana["headers"],
    )
    assert response.status_code == 400


def test_send_read_and_unread(client, pair, conversation):
    ana, ben = pair
    url = f"/api/messages/conversations/{conversation['id']}/messages"

    sent = client.post(url, json={"content": "  gm  "}, headers=ana["headers"])
    assert sent.status_code == 201
    assert sent.json()["content"] == "gm"
    client.post(url, json={"content": "ship it?"}, headers=ana["headers"])

    assert client.get("/api/messages/unread-count", headers=ben["headers"]).json() == {
        "count": 2
    }

    listing = client.get(url, headers=ben["headers"]).json()
    assert [m["content"] for m in listing["items"]] == ["gm", "ship it?"]
    assert listing["items"][0]["sender"]["nickname"] == "ana"

    read = client.post(
        f"/api/messages/conversations/{conversation['id']}/read", headers=ben["headers"]
    )
    assert read.json()["count"] == 2
    assert client.get("/api/messages/unread-count", headers=ben["headers"]).json()["count"] == 0


def test_empty_message_rejected(client, pair, conversation):
    ana, _ = pair
    response = client.post(
        f"/api/messages/conversations/{conversation['id']}/messages",
        json={"content": "   "},
        headers=ana["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "content"


def test_outsiders_cannot_read(client, register, conversation):
    eve = register("eve")
    response = client.get(
        f"/api/messages/conversations/{conversation['id']}/messages", headers=eve["headers"]
    )
    assert response.status_code == 403


def test_conversation_list_refresh(client, pair, conversation):
    ana, ben = pair
    listed = client.get("/api/messages/conversations", headers=ben["headers"]).json()
    assert listed["total"] == 1
    assert {
        listed["items"][0]["participant_1"]["nickname"],
        listed["items"][0]["participant_2"]["nickname"],
    } == {"ana", "ben"}

    fresh = client.get(
        "/api/messages/conversations", params={"refresh": True}, headers=ana["headers"]
    ).json()
    assert fresh["total"] == 1


def test_socket_pushes_new_messages(client, pair, conversation):
    ana, ben = pair
    path = f"/api/messages/conversations/{conversation['id']}/ws"
    with client.websocket_connect(f"{path}?token={ben['access_token']}") as ws:
        client.post(
            f"/api/messages/conversations/{conversation['id']}/messages",
            json={"content": "wagmi"},
            headers=ana["headers"],
        )
        pushed = ws.receive_json()
    assert pushed["content"] == "wagmi"
    assert pushed["sender"]["nickname"] == "ana"


def test_socket_requires_participant(client, register, conversation):
    eve = register("eve")
    path = f"/api/messages/conversations/{conversation['id']}/ws?token={eve['access_token']}"
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(path) as ws:
            ws.receive_json()


def test_socket_requires_token(client, conversation):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(
            f"/api/messages/conversations/{conversation['id']}/ws"
        ) as ws:
            ws.receive_json()
