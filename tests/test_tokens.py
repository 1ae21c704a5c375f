import httpx
import pytest
import pytest_asyncio
from firebase_admin import auth, exceptions as firebase_exceptions
from jose import jwt

from app.common import get_current_user
from app.config import settings
from app.core.errors import InvalidArgumentError, NotFoundError, PermissionDeniedError
from app.init_db import get_db
from app.main import app
from app.models import User
from app.services import stream_service
from app.services.stream_service import create_stream_token, issue_stream_token


@pytest.fixture
def firebase_users(monkeypatch):
    known = {"alice"}

    def fake_get_user(uid, app=None):
        if uid == "flaky":
            raise firebase_exceptions.UnknownError("backend unavailable")
        if uid not in known:
            raise auth.UserNotFoundError(f"No user record found for the provided user ID: {uid}")
        return {"uid": uid}

    monkeypatch.setattr(stream_service.auth, "get_user", fake_get_user)
    return known


@pytest.fixture
def minted(monkeypatch):
    calls = []

    def fake_create_custom_token(uid, developer_claims=None, app=None):
        calls.append((uid, developer_claims))
        return f"custom-{uid}".encode("utf-8")

    monkeypatch.setattr(auth, "create_custom_token", fake_create_custom_token)
    return calls


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_current_user():
        return {"uid": "alice"}

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


def test_stream_token_payload():
    token = create_stream_token("alice", issued_at=1_700_000_000)
    payload = jwt.decode(
        token,
        settings.stream_api_secret.get_secret_value(),
        algorithms=["HS256"],
        options={"verify_exp": False},
    )
    assert payload == {"user_id": "alice", "iat": 1_700_000_000, "exp": 1_700_000_000 + 24 * 60 * 60}


def test_stream_token_rules(firebase_users):
    with pytest.raises(InvalidArgumentError):
        issue_stream_token(None, {"uid": "alice"})
    with pytest.raises(PermissionDeniedError):
        issue_stream_token("bob", {"uid": "alice"})
    with pytest.raises(NotFoundError):
        issue_stream_token("ghost", {"uid": "ghost"})

    token = issue_stream_token("alice", {"uid": "alice"})
    payload = jwt.decode(token, settings.stream_api_secret.get_secret_value(), algorithms=["HS256"])
    assert payload["user_id"] == "alice"


def test_stream_token_lookup_failure_is_not_found(firebase_users):
    with pytest.raises(NotFoundError):
        issue_stream_token("flaky", {"uid": "flaky"})


async def test_stream_token_endpoint(client, firebase_users):
    response = await client.post("/stream/token", json={"userId": "alice"})
    assert response.status_code == 200
    body = response.json()
    assert body["userId"] == "alice" and body["success"] is True
    assert body["apiKey"] == settings.stream_api_key

    response = await client.post("/stream/token", json={"userId": "bob"})
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "permission-denied"


async def test_custom_token_creates_then_updates_profile(client, minted, session_factory):
    body = {"uid": "zoe", "displayName": "Zoe", "email": "zoe@example.com", "photoURL": "https://img/zoe.png"}
    response = await client.post("/auth/custom-token", json=body)

    assert response.status_code == 200
    assert response.json() == {"token": "custom-zoe", "uid": "zoe", "success": True}
    assert minted[-1] == ("zoe", {"displayName": "Zoe", "email": "zoe@example.com", "photoURL": "https://img/zoe.png"})

    body = {"uid": "zoe", "displayName": "Zoe Z", "email": "other@example.com"}
    await client.post("/auth/custom-token", json=body)
    assert minted[-1] == ("zoe", {"displayName": "Zoe Z", "email": "other@example.com"})

    async with session_factory() as session:
        zoe = await session.get(User, "zoe")
        assert zoe.display_name == "Zoe Z"
        assert zoe.email == "zoe@example.com"
        assert zoe.photo_url == ""
        assert zoe.last_login_at is not None


@pytest.mark.parametrize("body, missing", [
    ({"displayName": "Zoe", "email": "zoe@example.com"}, "uid"),
    ({"uid": "zoe", "email": "zoe@example.com"}, "displayName"),
    ({"uid": "zoe", "displayName": "Zoe", "email": " "}, "email"),
])
async def test_custom_token_requires_fields(client, minted, body, missing):
    response = await client.post("/auth/custom-token", json=body)
    assert response.status_code == 400
    assert response.json()["error"]["message"] == f"Missing required field: {missing}"
    assert minted == []


async def test_custom_token_checks_internal_secret(client, minted, monkeypatch):
    monkeypatch.setattr(settings, "custom_token_secret", settings.stream_api_secret)
    body = {"uid": "zoe", "displayName": "Zoe", "email": "zoe@example.com"}

    response = await client.post("/auth/custom-token", json=body)
    assert response.status_code == 403

    response = await client.post(
        "/auth/custom-token",
        json=body,
        headers={"X-Internal-Secret": settings.stream_api_secret.get_secret_value()},
    )
    assert response.status_code == 200
