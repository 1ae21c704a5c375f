import httpx
import pytest
import pytest_asyncio

from app.common import get_current_user
from app.init_db import get_db
from app.main import app


@pytest.fixture
def caller():
    return {"uid": "alice"}


@pytest_asyncio.fixture
async def client(session_factory, users, caller):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_current_user():
        return dict(caller)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


def as_user(client, caller, uid):
    caller["uid"] = uid
    return client


async def test_send_by_email_then_accept(client, caller):
    response = await client.post("/friends/request", json={"targetEmail": "bob@example.com"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "status": "sent"}

    response = await as_user(client, caller, "bob").post("/friends/accept", json={"fromUid": "alice"})
    assert response.json() == {"success": True, "status": "accepted"}

    friends = (await client.get("/friends/list")).json()
    assert [f["id"] for f in friends] == ["alice"]
    assert friends[0]["displayName"] == "Alice"


async def test_pending_requests_and_status(client, caller):
    await client.post("/friends/request", json={"targetId": "bob"})

    requests = (await client.get("/friends/requests", params={"request_type": "sent"})).json()
    assert [u["id"] for u in requests["sent"]] == ["bob"]
    assert requests["received"] == []

    status = (await client.get("/friends/status/bob")).json()
    assert status == {"isFriend": False, "requestSent": True, "requestReceived": False}

    received = (await as_user(client, caller, "bob").get("/friends/requests")).json()
    assert [u["id"] for u in received["received"]] == ["alice"]


async def test_decline_and_cancel_always_succeed(client):
    response = await client.post("/friends/cancel", json={"toUid": "bob"})
    assert response.json() == {"success": True, "status": "cancelled"}

    response = await client.post("/friends/decline", json={"fromUid": "carol"})
    assert response.json() == {"success": True, "status": "declined"}


async def test_remove_friend(client, caller):
    await client.post("/friends/request", json={"targetId": "bob"})
    await as_user(client, caller, "bob").post("/friends/request", json={"targetId": "alice"})

    response = await client.delete("/friends/alice")
    assert response.json() == {"success": True, "status": "removed"}
    assert (await client.get("/friends/list")).json() == []


@pytest.mark.parametrize("body, status_code, code", [
    ({}, 400, "invalid-argument"),
    ({"targetEmail": "nobody@example.com"}, 404, "not-found"),
    ({"targetId": "nobody"}, 404, "not-found"),
    ({"targetId": "alice"}, 400, "failed-precondition"),
])
async def test_send_errors(client, body, status_code, code):
    response = await client.post("/friends/request", json=body)
    assert response.status_code == status_code
    assert response.json()["error"]["code"] == code


async def test_blank_from_uid_is_invalid(client):
    response = await client.post("/friends/accept", json={"fromUid": "  "})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid-argument"


async def test_unexpected_failure_is_internal_without_details(client, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("connection string with secrets")

    monkeypatch.setattr("app.routers.users.friends.endpoints.send_friend_request", broken)

    response = await client.post("/friends/request", json={"targetId": "bob"})
    assert response.status_code == 500
    assert response.json()["error"] == {"code": "internal", "message": "Internal server error"}


@pytest.mark.parametrize("path, body, field", [
    ("/friends/accept", {}, "fromUid"),
    ("/friends/decline", {"fromUid": None}, "fromUid"),
    ("/friends/cancel", {"toUid": 123}, "toUid"),
    ("/friends/request", {"targetId": 5}, "targetId"),
])
async def test_malformed_target_is_invalid_argument(client, path, body, field):
    response = await client.post(path, json=body)
    assert response.status_code == 400
    assert response.json() == {
        "error": {"code": "invalid-argument", "message": f"Invalid or missing field: {field}"}
    }
