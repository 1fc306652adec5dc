"""
Integration tests for the HTTP API.

Runs the app in-process through httpx's ASGI transport with the session
store, LLM and Notion sink swapped for test doubles.
"""

import json
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from main import create_app
from niko.api.deps import (
    get_auth_provider,
    get_chat_session_repository,
    get_llm_provider,
    get_note_sink,
    get_preferences_store,
)
from niko.core.config import get_settings
from niko.core.exceptions import ConfigurationError, NoteSinkError
from niko.infrastructure.local.chat_session_repository import SqliteChatSessionRepository
from niko.infrastructure.local.mock_auth import MockAuthProvider
from niko.infrastructure.local.preferences_store import LocalPreferencesStore
from niko.interfaces.llm_provider import ILLMProvider
from niko.interfaces.note_sink import INoteSink
from niko.models.enums import ConversationState
from niko.models.notion import WordItem
from niko.models.tool_call import TextChunk
from niko.services import conversation_service


class EchoLLM(ILLMProvider):
    """Replies with the user's text split into two chunks."""

    async def stream_reply(self, text, history, image=None, system_instruction=None, tools=None):
        half = len(text) // 2
        yield TextChunk(text=text[:half])
        yield TextChunk(text=text[half:])


def _parse_sse(body: str) -> list[dict]:
    return [
        json.loads(block[len("data: "):])
        for block in body.split("\n\n")
        if block.startswith("data: ")
    ]


@pytest.fixture
def note_sink():
    return AsyncMock(spec=INoteSink)


@pytest.fixture
def app(session_factory, note_sink, settings, tmp_path):
    app = create_app()
    app.dependency_overrides[get_chat_session_repository] = lambda: SqliteChatSessionRepository(
        session_factory
    )
    app.dependency_overrides[get_llm_provider] = lambda: EchoLLM()
    app.dependency_overrides[get_note_sink] = lambda: note_sink
    app.dependency_overrides[get_auth_provider] = lambda: MockAuthProvider()
    app.dependency_overrides[get_preferences_store] = lambda: LocalPreferencesStore(
        tmp_path / "preferences.json"
    )
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.mark.integration
@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "inference_configured" in response.json()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_chat_stream_and_session_history(client):
    response = await client.post("/api/chat/stream", json={"text": "Hello there"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    events = _parse_sse(response.text)
    assert [e["chunk_type"] for e in events] == ["session", "text", "text", "done"]
    assert events[-1]["content"] == "Hello there"
    session_id = events[0]["session_id"]

    response = await client.get(f"/api/chat/sessions/{session_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Hello there"
    assert [m["role"] for m in data["messages"]] == ["user", "model"]

    response = await client.get("/api/chat/sessions")
    assert [s["id"] for s in response.json()] == [session_id]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_chat_stream_rejects_empty_message(client):
    response = await client.post("/api/chat/stream", json={"text": ""})
    assert response.status_code == 400


@pytest.mark.integration
@pytest.mark.asyncio
async def test_chat_stream_rejects_concurrent_send(client):
    key = ("dev_user", "busy-session")
    conversation_service._activity[key] = conversation_service.SessionActivity(
        state=ConversationState.STREAMING
    )
    try:
        response = await client.post(
            "/api/chat/stream", json={"text": "hi", "session_id": "busy-session"}
        )
        assert response.status_code == 409

        response = await client.delete("/api/chat/sessions/busy-session")
        assert response.status_code == 409
    finally:
        conversation_service._activity.pop(key, None)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_chat_stream_without_api_key_is_503(app, client):
    def unconfigured():
        raise ConfigurationError("GOOGLE_API_KEY is required")

    app.dependency_overrides[get_llm_provider] = unconfigured

    response = await client.post("/api/chat/stream", json={"text": "hi"})

    assert response.status_code == 503
    assert "GOOGLE_API_KEY" in response.json()["detail"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_session_crud(client):
    response = await client.post("/api/chat/sessions")
    assert response.status_code == 201
    session = response.json()
    assert session["title"] == "새로운 대화"

    response = await client.get(f"/api/chat/sessions/{session['id']}/state")
    assert response.json()["state"] == "IDLE"

    response = await client.delete(f"/api/chat/sessions/{session['id']}")
    assert response.status_code == 204

    response = await client.get(f"/api/chat/sessions/{session['id']}")
    assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
async def test_notion_save_word(client, note_sink):
    response = await client.post(
        "/api/notion",
        json={
            "token": "secret_token",
            "databaseId": "word-db",
            "type": "word",
            "data": {"word": "apple", "meaning": "사과", "example": "An apple."},
        },
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True, "error": None}
    note_sink.create_word.assert_awaited_once()


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"databaseId": "db", "type": "word", "data": {"word": "a"}},
        {"token": "t", "type": "word", "data": {"word": "a"}},
        {"token": "t", "databaseId": "db", "data": {"word": "a"}},
    ],
)
async def test_notion_save_missing_fields_is_400(client, note_sink, body):
    response = await client.post("/api/notion", json=body)

    assert response.status_code == 400
    assert response.json()["ok"] is False
    note_sink.create_word.assert_not_awaited()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_notion_save_failure_is_500(client, note_sink):
    note_sink.create_sentence.side_effect = NoteSinkError("validation_error", status_code=400)

    response = await client.post(
        "/api/notion",
        json={
            "token": "t",
            "databaseId": "db",
            "type": "sentence",
            "data": {"sentence": "Hi.", "meaning": "안녕.", "key_phrases": ""},
        },
    )

    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "validation_error"}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_notion_words_requires_server_config(client):
    response = await client.get("/api/notion")
    assert response.status_code == 503


@pytest.mark.integration
@pytest.mark.asyncio
async def test_notion_words(app, client, note_sink, settings):
    configured = settings.model_copy(update={"NOTION_API_KEY": "key", "NOTION_DB_ID": "db"})
    app.dependency_overrides[get_settings] = lambda: configured
    note_sink.query_words.return_value = [WordItem(word="apple", meaning="사과", example="")]

    response = await client.get("/api/notion")

    assert response.status_code == 200
    assert response.json() == [{"word": "apple", "meaning": "사과", "example": ""}]
    target = note_sink.query_words.await_args.args[0]
    assert (target.token, target.database_id) == ("key", "db")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_preferences(client):
    response = await client.get("/api/preferences")
    assert response.json()["theme"] == "light"

    response = await client.put("/api/preferences/theme", json={"theme": "dark"})
    assert response.json()["theme"] == "dark"

    response = await client.put(
        "/api/preferences/notion",
        json={"apiKey": "secret", "wordDbId": "w", "sentenceDbId": "s", "enabled": True},
    )
    assert response.status_code == 200
    config = response.json()["notion_config"]
    assert config["apiKey"] == "secret"
    assert config["enabled"] is True

    response = await client.get("/api/preferences")
    assert response.json()["theme"] == "dark"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_preferences_are_per_user(client):
    alice = {"Authorization": "Bearer alice"}
    bob = {"Authorization": "Bearer bob"}

    await client.put(
        "/api/preferences/notion",
        json={"apiKey": "alice-secret", "wordDbId": "w", "enabled": True},
        headers=alice,
    )
    await client.put("/api/preferences/theme", json={"theme": "dark"}, headers=alice)

    response = await client.get("/api/preferences", headers=bob)
    assert response.json()["notion_config"]["apiKey"] == ""
    assert response.json()["theme"] == "light"

    response = await client.get("/api/preferences", headers=alice)
    assert response.json()["notion_config"]["apiKey"] == "alice-secret"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_invalid_authorization_header(client):
    response = await client.get("/api/chat/sessions", headers={"Authorization": "Token abc"})
    assert response.status_code == 401
