from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio
from openai import APIConnectionError

from app.common import get_current_user
from app.core.errors import UnavailableError
from app.main import app
from app.schemas.llm_chat import ChatTurn, Sender
from app.services.llm_chat_service import get_llm_client, suggest_replies, translate_text


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content=None, error=None):
    completions = FakeCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


async def test_suggest_replies_cleans_and_limits_lines():
    client, completions = fake_client('1. Sounds good!\n- "See you then"\n\n3) Can we do 7?\nExtra one')
    turns = [
        ChatTurn(sender=Sender.them, content="Dinner at 6?"),
        ChatTurn(sender=Sender.me, content="Maybe"),
    ]

    suggestions = await suggest_replies(client, turns, count=3, tone="friendly")

    assert suggestions == ["Sounds good!", "See you then", "Can we do 7?"]
    messages = completions.calls[0]["messages"]
    assert "friendly" in messages[0]["content"]
    assert [m["role"] for m in messages[1:]] == ["user", "assistant"]


async def test_translate_returns_stripped_text():
    client, completions = fake_client("  Bonjour  ")

    assert await translate_text(client, "Hello", "French", "English") == "Bonjour"
    assert "from English into French" in completions.calls[0]["messages"][0]["content"]


async def test_provider_failure_is_unavailable():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    client, _ = fake_client(error=APIConnectionError(request=request))

    with pytest.raises(UnavailableError):
        await translate_text(client, "Hello", "French")


@pytest_asyncio.fixture
async def http():
    client, _ = fake_client("Hola")
    app.dependency_overrides[get_llm_client] = lambda: client
    app.dependency_overrides[get_current_user] = lambda: {"uid": "alice"}
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


async def test_translate_endpoint(http):
    response = await http.post("/llm/translate", json={"text": "Hello", "targetLanguage": "Spanish"})
    assert response.status_code == 200
    assert response.json() == {"translation": "Hola"}


async def test_suggest_replies_endpoint_validates_input(http):
    response = await http.post("/llm/suggest-replies", json={"messages": []})
    assert response.status_code == 400
    assert response.json()["error"] == {"code": "invalid-argument", "message": "Invalid or missing field: messages"}
