"""
Tests for chat agent sessions.
"""

import asyncio
from types import SimpleNamespace

import pytest
from pydantic_ai.messages import ToolReturnPart
from pydantic_ai.models.function import FunctionModel
from pydantic_ai.toolsets import FunctionToolset

from agent import AssistantAgent, FlightAgent, MCPClientManager, SessionRegistry
from agent.tools import weather
from core import (
    Approval,
    DynamicToolPart,
    Event,
    InvalidOperationError,
    NotFoundError,
    TextPart,
    ToolPart,
    user_message,
)

from .conftest import text_model, tool_calling_model
from .test_formatting import NONSTOP_RESULT


class RecordingEventBus:
    def __init__(self):
        self.events: list[Event] = []

    async def publish(self, event: Event) -> None:
        self.events.append(event)


async def collect(stream) -> list[dict]:
    return [chunk async for chunk in stream]


@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


class TestAssistantAgent:
    """Test the fixed-tool assistant session."""

    @pytest.mark.asyncio
    async def test_turn_is_persisted(self, store, config, event_bus):
        session = AssistantAgent(
            "default", store=store, config=config, event_bus=event_bus, model=text_model("Hi!")
        )

        chunks = await collect(session.on_chat_message(new_message=user_message("Hello")))

        assert chunks[-1]["type"] == "finish"
        messages = session.messages
        assert [m.role for m in messages] == ["user", "assistant"]
        assert TextPart(text="Hi!") in messages[1].parts
        assert store.load("chat/default") == messages
        assert event_bus.events[-1].type == "messages.updated"
        assert event_bus.events[-1].properties["name"] == "default"
        assert len(event_bus.events[-1].properties["messages"]) == 2

    @pytest.mark.asyncio
    async def test_client_messages_replace_history(self, store, config):
        session = AssistantAgent("default", store=store, config=config, model=text_model("ok"))
        await session.append_message(user_message("old"))

        await collect(session.on_chat_message(messages=[user_message("new")]))

        assert session.messages[0].parts == [TextPart(text="new")]
        assert len(session.messages) == 2

    @pytest.mark.asyncio
    async def test_approval_round_trip(self, store, config, monkeypatch):
        """Propose, approve, then resolve a weather lookup across two turns."""
        lookups = []

        async def fake_fetch(city):
            lookups.append(city)
            return f"{city}: sunny"

        monkeypatch.setattr(weather, "fetch_weather", fake_fetch)
        model, seen = tool_calling_model("get_weather_information", {"city": "Paris"})
        session = AssistantAgent("default", store=store, config=config, model=model)

        first = await collect(session.on_chat_message(new_message=user_message("Weather?")))
        assert first[-1]["finishReason"] == "tool-calls"
        assert lookups == []
        [call] = [c for c in first if c["type"] == "tool-input-available"]

        part = await session.decide_tool_call(call["toolCallId"], approved=True)
        assert part.output == Approval.YES.value

        second = await collect(session.on_chat_message())
        assert second[0] == {
            "type": "tool-output-available",
            "toolCallId": call["toolCallId"],
            "output": "Paris: sunny",
        }
        assert lookups == ["Paris"]

        stored = [
            p for m in session.messages for p in m.parts if isinstance(p, ToolPart)
        ]
        assert stored[0].output == "Paris: sunny"

        # A third turn does not execute the tool again
        await session.append_message(user_message("Thanks"))
        await collect(session.on_chat_message())
        assert lookups == ["Paris"]
        returns = [p for m in seen[-1] for p in m.parts if isinstance(p, ToolReturnPart)]
        assert returns[0].content == "Paris: sunny"

    @pytest.mark.asyncio
    async def test_decision_errors(self, store, config):
        model, _ = tool_calling_model("get_weather_information", {"city": "Paris"})
        session = AssistantAgent("default", store=store, config=config, model=model)
        chunks = await collect(session.on_chat_message(new_message=user_message("Weather?")))
        [call] = [c for c in chunks if c["type"] == "tool-input-available"]

        with pytest.raises(NotFoundError):
            await session.decide_tool_call("missing", approved=True)

        await session.decide_tool_call(call["toolCallId"], approved=False)
        with pytest.raises(InvalidOperationError):
            await session.decide_tool_call(call["toolCallId"], approved=True)

    @pytest.mark.asyncio
    async def test_execute_task_appends_message_without_inference(self, store, config):
        calls = []

        async def stream(messages, info):
            calls.append(messages)
            yield "unused"

        session = AssistantAgent(
            "default", store=store, config=config, model=FunctionModel(stream_function=stream)
        )
        schedule = session.scheduler.schedule(3600, "water the plants")

        await session.execute_task("water the plants", schedule)

        [message] = session.messages
        assert message.role == "user"
        assert message.parts == [TextPart(text="Running scheduled task: water the plants")]
        assert calls == []
        await session.shutdown()
        assert session.scheduler.get_schedules() == []

    @pytest.mark.asyncio
    async def test_abort(self, store, config):
        release = asyncio.Event()

        async def stream(messages, info):
            yield "Partial"
            await release.wait()
            yield " answer"

        session = AssistantAgent(
            "default", store=store, config=config, model=FunctionModel(stream_function=stream)
        )
        assert session.abort() is False

        chunks = []
        try:
            async for chunk in session.on_chat_message(new_message=user_message("Go")):
                chunks.append(chunk)
                if chunk["type"] == "text-delta":
                    assert session.abort() is True
        finally:
            release.set()

        assert chunks[-1] == {"type": "abort"}
        assert session.is_running is False
        assert TextPart(text="Partial") in session.messages[-1].parts

    @pytest.mark.asyncio
    async def test_clear(self, store, config, event_bus):
        session = AssistantAgent(
            "default", store=store, config=config, event_bus=event_bus, model=text_model("x")
        )
        await session.append_message(user_message("hi"))

        await session.clear()

        assert session.messages == []
        assert event_bus.events[-1].properties["messages"] == []

    @pytest.mark.asyncio
    async def test_list_tools(self, store, config):
        session = AssistantAgent("default", store=store, config=config, model=text_model("x"))

        tools = await session.list_tools()

        assert tools["get_weather_information"]["requiresApproval"] is True
        assert tools["get_local_time"]["requiresApproval"] is False


class FakeFlightsServer(FunctionToolset):
    """In-process stand-in for the remote flights MCP server."""

    instances: list["FakeFlightsServer"] = []

    def __init__(self, url: str):
        super().__init__([self.search_flights])
        self.url = url
        FakeFlightsServer.instances.append(self)

    def search_flights(self, origin: str, destination: str) -> dict:
        """Search flights between two airports."""
        return NONSTOP_RESULT

    async def list_tools(self):
        return [SimpleNamespace(name="search_flights", description="Search", inputSchema={})]


class TestFlightAgent:
    """Test the remote-tool flight session."""

    @pytest.fixture
    def mcp(self) -> MCPClientManager:
        FakeFlightsServer.instances.clear()
        return MCPClientManager(server_factory=FakeFlightsServer)

    @pytest.mark.asyncio
    async def test_flight_results_are_formatted_for_the_model(self, store, config, mcp):
        model, seen = tool_calling_model(
            "search_flights", {"origin": "CDG", "destination": "FCO"}
        )
        session = FlightAgent("trip", store=store, config=config, model=model, mcp=mcp)

        await collect(session.on_chat_message(new_message=user_message("Flights to Rome?")))

        # Within the turn the model sees the raw tool result
        [part] = [p for m in session.messages for p in m.parts if isinstance(p, ToolPart)]
        assert part.output == NONSTOP_RESULT
        assert not any(
            isinstance(p, DynamicToolPart) for m in session.messages for p in m.parts
        )

        # On the next turn the stored result reaches the model as formatted text
        await session.append_message(user_message("Book the first one"))
        await collect(session.on_chat_message())
        returns = [p for m in seen[-1] for p in m.parts if isinstance(p, ToolReturnPart)]
        assert returns[0].content.startswith("Found 1 flights:")
        assert part.output == session.messages[1].parts[1].output

    @pytest.mark.asyncio
    async def test_connects_once(self, store, config, mcp):
        first = FlightAgent("a", store=store, config=config, model=text_model("hi"), mcp=mcp)
        second = FlightAgent("b", store=store, config=config, model=text_model("hi"), mcp=mcp)

        await asyncio.gather(
            collect(first.on_chat_message(new_message=user_message("x"))),
            collect(second.on_chat_message(new_message=user_message("y"))),
        )

        assert len(FakeFlightsServer.instances) == 1
        assert len(mcp.list_servers()) == 1
        assert mcp.get_toolsets() == FakeFlightsServer.instances

    @pytest.mark.asyncio
    async def test_connection_failure_ends_turn_with_error(self, store, config):
        class Unreachable:
            def __init__(self, url):
                pass

            async def __aenter__(self):
                raise ConnectionError("flights server unreachable")

        session = FlightAgent(
            "trip",
            store=store,
            config=config,
            model=text_model("hi"),
            mcp=MCPClientManager(server_factory=Unreachable),
        )

        chunks = await collect(session.on_chat_message(new_message=user_message("x")))

        assert chunks == [{"type": "error", "errorText": "flights server unreachable"}]

    @pytest.mark.asyncio
    async def test_list_tools(self, store, config, mcp):
        session = FlightAgent("trip", store=store, config=config, model=text_model("hi"), mcp=mcp)

        assert list(await session.list_tools()) == ["search_flights"]


class TestSessionRegistry:
    def test_unknown_agent_type(self, store, config):
        registry = SessionRegistry(store=store, config=config)

        with pytest.raises(NotFoundError):
            registry.get("weather", "default")

    def test_sessions_are_reused(self, store, config):
        registry = SessionRegistry(store=store, config=config, model=text_model("hi"))

        session = registry.get("chat", "default")

        assert registry.get("chat", "default") is session
        assert registry.get("chat", "other") is not session
        assert isinstance(registry.get("flight", "default"), FlightAgent)
        assert registry.get("flight", "default").mcp is registry.mcp
