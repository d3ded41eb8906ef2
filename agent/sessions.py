"""
Chat agent sessions.

A session is one named conversation with one agent type. It loads the stored
history at the start of each request, runs the turn, and saves the result,
holding the conversation's lock in between so turns never interleave.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, AsyncIterator, ClassVar, Collection

from pydantic_ai import Agent

from config import (
    ASSISTANT_SYSTEM_PROMPT,
    FLIGHT_SYSTEM_PROMPT,
    FLIGHTS_SERVER_NAME,
    Config,
    get_config,
)
from core import (
    Chunk,
    ConversationStore,
    Event,
    EventBus,
    ExecutionRegistry,
    Executor,
    Message,
    NotFoundError,
    NullEventBus,
    Schedule,
    TaskScheduler,
    ToolPart,
    apply_resolved_parts,
    conversation_store,
    find_tool_part,
    record_tool_decision,
    scheduled_task_message,
)
from core.logging_config import conversation_context

from .agent import create_agent
from .formatting import transform_flight_results
from .mcp import MCPClientManager
from .orchestrator import FinishResult, OnFinish, stream_chat_response
from .tools import ASSISTANT_TOOL_NAMES, ASSISTANT_TOOLS, assistant_executions

logger = logging.getLogger(__name__)


class ChatAgentSession:
    """
    Base class for a conversation with one agent type.

    Subclasses provide the pydantic-ai agent, the approval executors and
    optionally remote toolsets and a history transform.
    """

    agent_type: ClassVar[str] = "chat"
    system_prompt: ClassVar[str] = ASSISTANT_SYSTEM_PROMPT

    def __init__(
        self,
        name: str,
        *,
        store: ConversationStore | None = None,
        event_bus: EventBus | None = None,
        config: Config | None = None,
        model: Any = None,
    ) -> None:
        self.name = name
        self.key = f"{self.agent_type}/{name}"
        self.config = config or get_config()
        self._store = store or conversation_store
        self._event_bus = event_bus or NullEventBus()
        self._abort_signal: asyncio.Event | None = None

        overrides = self.config.agent(self.agent_type)
        self.model = model or overrides.model or self.config.model
        self.max_steps = overrides.max_steps or self.config.max_steps
        self.agent = self.create_agent(overrides.system_prompt or self.system_prompt)

    # Hooks for subclasses

    def create_agent(self, system_prompt: str) -> Agent[Any, Any]:
        return create_agent(self.model, system_prompt)

    @property
    def executions(self) -> Mapping[str, Executor | None]:
        return ExecutionRegistry()

    @property
    def deps(self) -> Any:
        return None

    @property
    def static_tool_names(self) -> Collection[str] | None:
        return None

    async def get_toolsets(self) -> list[Any]:
        return []

    def transform(self, messages: list[Message]) -> list[Message]:
        return messages

    async def list_tools(self) -> dict[str, dict[str, Any]]:
        """Describe the tools available to the model in this session."""
        return {}

    # Conversation state

    @property
    def messages(self) -> list[Message]:
        """A copy of the stored conversation."""
        return self._store.load(self.key)

    @property
    def is_running(self) -> bool:
        return self._abort_signal is not None

    async def _save(self, messages: list[Message]) -> None:
        self._store.save(self.key, messages)
        await self._publish(messages)

    async def _publish(self, messages: list[Message]) -> None:
        await self._event_bus.publish(
            Event(
                type="messages.updated",
                properties={
                    "agent": self.agent_type,
                    "name": self.name,
                    "messages": [m.model_dump(mode="json") for m in messages],
                },
            )
        )

    async def append_message(self, message: Message) -> None:
        """Append a message to the stored conversation without running inference."""
        async with self._store.lock(self.key):
            await self._save([*self._store.load(self.key), message])

    async def clear(self) -> None:
        """Forget the conversation."""
        async with self._store.lock(self.key):
            self._store.delete(self.key)
            await self._publish([])
        logger.info("Cleared conversation %s", self.key)

    async def decide_tool_call(self, tool_call_id: str, approved: bool) -> ToolPart:
        """
        Record the user's decision on a tool call awaiting approval.

        Raises:
            NotFoundError: If the tool call does not exist
            InvalidOperationError: If the tool call is not awaiting a decision
        """
        async with self._store.lock(self.key):
            messages = record_tool_decision(self._store.load(self.key), tool_call_id, approved)
            await self._save(messages)
        return find_tool_part(messages, tool_call_id)[1]

    def abort(self) -> bool:
        """
        Abort the running turn.

        Returns:
            True if a turn was running
        """
        if self._abort_signal is None:
            return False
        logger.info("Aborting turn of %s", self.key)
        self._abort_signal.set()
        return True

    # Chat turns

    async def on_chat_message(
        self,
        on_finish: OnFinish | None = None,
        abort_signal: asyncio.Event | None = None,
        messages: list[Message] | None = None,
        new_message: Message | None = None,
    ) -> AsyncIterator[Chunk]:
        """
        Respond to the stored conversation.

        Args:
            on_finish: Called with the turn's result after it was saved
            abort_signal: Event that cancels the turn once set
            messages: Full conversation sent by the client, replacing the
                stored one
            new_message: Message appended to the conversation before the turn

        Yields:
            UI chunks of the response
        """
        abort_signal = abort_signal or asyncio.Event()
        async with self._store.lock(self.key):
            with conversation_context(self.key):
                self._abort_signal = abort_signal
                try:
                    if messages is not None or new_message is not None:
                        stored = messages if messages is not None else self._store.load(self.key)
                        if new_message is not None:
                            stored = [*stored, new_message]
                        await self._save(stored)
                    history = self._store.load(self.key)

                    try:
                        toolsets = await self.get_toolsets()
                    except Exception as e:
                        logger.exception("Failed to prepare tools for %s", self.key)
                        yield {"type": "error", "errorText": str(e)}
                        return

                    async def handle_resolved(resolved: list[Message]) -> None:
                        nonlocal history
                        updated = apply_resolved_parts(history, resolved)
                        if updated != history:
                            history = updated
                            await self._save(history)

                    async def handle_finish(result: FinishResult) -> None:
                        if result.message.parts:
                            await self._save([*history, result.message])
                        logger.info(
                            "Turn of %s finished (%s, %d tool call(s))",
                            self.key,
                            result.finish_reason,
                            result.tool_call_count,
                        )
                        if on_finish is not None:
                            await on_finish(result)

                    stream = stream_chat_response(
                        messages=history,
                        agent=self.agent,
                        executions=self.executions,
                        on_finish=handle_finish,
                        abort_signal=abort_signal,
                        on_resolved=handle_resolved,
                        transform=self.transform,
                        toolsets=toolsets,
                        deps=self.deps,
                        max_steps=self.max_steps,
                        static_tool_names=self.static_tool_names,
                    )
                    async for chunk in stream:
                        yield chunk
                finally:
                    self._abort_signal = None

    async def shutdown(self) -> None:
        """Release resources held by the session."""
        self.abort()


class AssistantAgent(ChatAgentSession):
    """General assistant with local tools and scheduled tasks."""

    agent_type = "chat"
    system_prompt = ASSISTANT_SYSTEM_PROMPT

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.scheduler = TaskScheduler(self.execute_task)
        self._executions = assistant_executions()
        super().__init__(name, **kwargs)

    def create_agent(self, system_prompt: str) -> Agent[Any, Any]:
        return create_agent(
            self.model, system_prompt, tools=ASSISTANT_TOOLS, deps_type=TaskScheduler
        )

    @property
    def executions(self) -> Mapping[str, Executor | None]:
        return self._executions

    @property
    def deps(self) -> TaskScheduler:
        return self.scheduler

    @property
    def static_tool_names(self) -> Collection[str]:
        return ASSISTANT_TOOL_NAMES

    async def list_tools(self) -> dict[str, dict[str, Any]]:
        return {
            tool.name: {
                "name": tool.name,
                "description": tool.description or "",
                "requiresApproval": tool.requires_approval,
            }
            for tool in ASSISTANT_TOOLS
        }

    async def execute_task(self, description: str, schedule: Schedule) -> None:
        """Record that a scheduled task fired, without running inference."""
        logger.info("Scheduled task %s fired for %s", schedule.id, self.key)
        await self.append_message(scheduled_task_message(description))

    async def shutdown(self) -> None:
        await super().shutdown()
        self.scheduler.shutdown()


class FlightAgent(ChatAgentSession):
    """Flight booking assistant backed by a remote MCP tool server."""

    agent_type = "flight"
    system_prompt = FLIGHT_SYSTEM_PROMPT

    def __init__(self, name: str, *, mcp: MCPClientManager | None = None, **kwargs: Any) -> None:
        self.mcp = mcp or MCPClientManager()
        super().__init__(name, **kwargs)

    async def get_toolsets(self) -> list[Any]:
        server = self.config.mcp.get(FLIGHTS_SERVER_NAME)
        if server is None:
            raise NotFoundError("MCP server config", FLIGHTS_SERVER_NAME)
        await self.mcp.ensure_connected(FLIGHTS_SERVER_NAME, server.url, server.callback_url)
        return self.mcp.get_toolsets()

    def transform(self, messages: list[Message]) -> list[Message]:
        return transform_flight_results(messages)

    async def list_tools(self) -> dict[str, dict[str, Any]]:
        await self.get_toolsets()
        return await self.mcp.list_tools()

    async def shutdown(self) -> None:
        await super().shutdown()
        await self.mcp.close()
