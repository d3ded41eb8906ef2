"""
Integration tests for the FastAPI server.
Uses the real FastAPI TestClient with scripted models.
"""
import json

import pytest
from fastapi.testclient import TestClient

from agent import SessionRegistry
from agent.tools import weather
from core import Event
from server import app, get_sessions, set_sessions
from server.app import cors_origins
from server.event_bus import SSEEventBus
from server.middleware import conversation_tag
from server.routes.events import matches

from .conftest import text_model, tool_calling_model


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse-starlette keeps an exit event bound to the first event loop."""
    from sse_starlette.sse import AppStatus

    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
def registry(store, config):
    """Install a session registry answering with a scripted model."""
    sessions = SessionRegistry(store=store, config=config, model=text_model("Hello!"))
    set_sessions(sessions)
    yield sessions
    set_sessions(None)


@pytest.fixture
def client(registry):
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


def stream_chunks(response) -> list:
    """Parse the ``data:`` lines of an SSE response."""
    chunks = []
    for line in response.text.splitlines():
        if line.startswith("data: "):
            data = line[len("data: "):]
            chunks.append(data if data == "[DONE]" else json.loads(data))
    return chunks


class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["agents"] == ["chat", "flight"]


class TestChatEndpoint:
    """Test the streaming chat route."""

    def test_chat_streams_ui_chunks(self, client):
        response = client.post("/agents/chat/default/chat", json={"text": "Hi"})

        assert response.status_code == 200
        assert response.headers["x-vercel-ai-ui-message-stream"] == "v1"
        chunks = stream_chunks(response)
        assert chunks[-1] == "[DONE]"
        assert chunks[0]["type"] == "start"
        assert chunks[-2] == {"type": "finish", "finishReason": "stop"}
        deltas = "".join(c["delta"] for c in chunks[:-1] if c["type"] == "text-delta")
        assert deltas == "Hello!"

    def test_chat_persists_conversation(self, client):
        client.post("/agents/chat/default/chat", json={"text": "Hi"})

        response = client.get("/agents/chat/default/messages")

        assert response.status_code == 200
        messages = response.json()
        assert [m["role"] for m in messages] == ["user", "assistant"]
        assert messages[0]["parts"] == [{"type": "text", "text": "Hi"}]

    def test_chat_with_full_message_list(self, client):
        payload = {
            "id": "default",
            "messages": [
                {"id": "u1", "role": "user", "parts": [{"type": "text", "text": "Hello"}]}
            ],
        }

        response = client.post("/agents/chat/default/chat", json=payload)

        assert response.status_code == 200
        stored = client.get("/agents/chat/default/messages").json()
        assert stored[0]["id"] == "u1"

    def test_unknown_agent_type(self, client):
        response = client.post("/agents/weather/default/chat", json={"text": "Hi"})

        assert response.status_code == 404

    def test_empty_conversation_streams_error(self, client):
        chunks = stream_chunks(client.post("/agents/chat/empty/chat", json={}))

        assert chunks[0]["type"] == "error"
        assert chunks[-1] == "[DONE]"


class TestMessagesEndpoints:
    def test_empty_conversation(self, client):
        assert client.get("/agents/chat/new/messages").json() == []

    def test_clear(self, client):
        client.post("/agents/chat/default/chat", json={"text": "Hi"})

        response = client.delete("/agents/chat/default/messages")

        assert response.status_code == 200
        assert client.get("/agents/chat/default/messages").json() == []


class TestDecisionEndpoint:
    """Test approving and denying tool calls over HTTP."""

    @pytest.fixture
    def weather_session(self, registry, store, config, monkeypatch):
        async def fake_fetch(city):
            return f"{city}: sunny"

        monkeypatch.setattr(weather, "fetch_weather", fake_fetch)
        model, _ = tool_calling_model("get_weather_information", {"city": "Paris"})
        registry._session_kwargs["model"] = model
        return registry.get("chat", "weather")

    def test_approve_then_resolve(self, client, weather_session):
        first = stream_chunks(
            client.post("/agents/chat/weather/chat", json={"text": "Weather in Paris?"})
        )
        [call] = [c for c in first[:-1] if c["type"] == "tool-input-available"]

        response = client.post(
            f"/agents/chat/weather/tool-calls/{call['toolCallId']}/decision",
            json={"approved": True},
        )
        assert response.status_code == 200
        assert response.json()["output"] == "Yes, confirmed."

        second = stream_chunks(client.post("/agents/chat/weather/chat", json={}))
        assert second[0] == {
            "type": "tool-output-available",
            "toolCallId": call["toolCallId"],
            "output": "Paris: sunny",
        }

    def test_deny(self, client, weather_session):
        first = stream_chunks(
            client.post("/agents/chat/weather/chat", json={"text": "Weather in Paris?"})
        )
        [call] = [c for c in first[:-1] if c["type"] == "tool-input-available"]
        client.post(
            f"/agents/chat/weather/tool-calls/{call['toolCallId']}/decision",
            json={"approved": False},
        )

        second = stream_chunks(client.post("/agents/chat/weather/chat", json={}))

        assert second[0]["output"] == "Error: User denied access to tool execution"

    def test_unknown_tool_call(self, client):
        response = client.post(
            "/agents/chat/default/tool-calls/missing/decision", json={"approved": True}
        )

        assert response.status_code == 404

    def test_decision_twice_conflicts(self, client, weather_session):
        first = stream_chunks(
            client.post("/agents/chat/weather/chat", json={"text": "Weather in Paris?"})
        )
        [call] = [c for c in first[:-1] if c["type"] == "tool-input-available"]
        url = f"/agents/chat/weather/tool-calls/{call['toolCallId']}/decision"

        client.post(url, json={"approved": True})
        response = client.post(url, json={"approved": False})

        assert response.status_code == 409


class TestAbortAndToolsEndpoints:
    def test_abort_without_running_turn(self, client):
        response = client.post("/agents/chat/default/abort")

        assert response.status_code == 200
        assert response.json() is False

    def test_list_tools(self, client):
        response = client.get("/agents/chat/default/tools")

        assert response.status_code == 200
        assert "get_weather_information" in response.json()

    def test_sessions_registry_is_installed(self, registry):
        assert get_sessions() is registry


class TestEventBus:
    """Test the SSE event bus."""

    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers(self):
        bus = SSEEventBus()
        queue = bus.subscribe()

        await bus.publish(Event(type="messages.updated", properties={"name": "default"}))

        assert queue.get_nowait() == {
            "type": "messages.updated",
            "properties": {"name": "default"},
        }

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = SSEEventBus()
        queue = bus.subscribe()
        bus.unsubscribe(queue)

        await bus.publish(Event(type="messages.updated", properties={}))

        assert queue.empty()


class TestMiddleware:
    def test_conversation_tag(self):
        assert conversation_tag("/agents/chat/default/chat") == "[chat/default] "
        assert conversation_tag("/health") == ""

    def test_cors_origins(self):
        assert cors_origins(None) == ["*"]
        assert cors_origins("https://a.example, https://b.example") == [
            "https://a.example",
            "https://b.example",
        ]


class TestEventFilter:
    def test_matches_conversation(self):
        event = {"type": "messages.updated", "properties": {"agent": "chat", "name": "default"}}

        assert matches(event, None, None)
        assert matches(event, "chat", "default")
        assert not matches(event, "flight", None)
        assert not matches(event, "chat", "other")
