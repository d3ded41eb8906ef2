"""
Registry of agent types and their live sessions.

Requests address a conversation as ``/agents/<agent>/<name>``; the agent type
selects the session class and the name selects the conversation. Sessions
are created on first use and kept for the lifetime of the process.
"""

import logging
from typing import Any

from core import EventBus, NotFoundError

from .mcp import MCPClientManager
from .sessions import AssistantAgent, ChatAgentSession, FlightAgent

logger = logging.getLogger(__name__)

AGENT_TYPES: dict[str, type[ChatAgentSession]] = {
    AssistantAgent.agent_type: AssistantAgent,
    FlightAgent.agent_type: FlightAgent,
}


class SessionRegistry:
    """
    Lazily created sessions keyed by agent type and conversation name.

    Flight sessions share one MCP client manager so the remote tool server is
    connected once per process.
    """

    def __init__(self, event_bus: EventBus | None = None, **session_kwargs: Any) -> None:
        self._event_bus = event_bus
        self._session_kwargs = session_kwargs
        self._sessions: dict[str, ChatAgentSession] = {}
        self.mcp = MCPClientManager()

    def get(self, agent: str, name: str) -> ChatAgentSession:
        """
        Get or create the session for a conversation.

        Raises:
            NotFoundError: If the agent type is unknown
        """
        session_class = AGENT_TYPES.get(agent)
        if session_class is None:
            raise NotFoundError("Agent", agent)

        key = f"{agent}/{name}"
        session = self._sessions.get(key)
        if session is None:
            kwargs = dict(self._session_kwargs)
            if self._event_bus is not None:
                kwargs["event_bus"] = self._event_bus
            if issubclass(session_class, FlightAgent):
                kwargs["mcp"] = self.mcp
            session = session_class(name, **kwargs)
            self._sessions[key] = session
            logger.info("Created %s session %s", agent, name)
        return session

    def list(self) -> list[ChatAgentSession]:
        return list(self._sessions.values())

    async def shutdown(self) -> None:
        """Abort running turns, cancel schedules and close remote connections."""
        for session in self._sessions.values():
            await session.shutdown()
        await self.mcp.close()
        self._sessions.clear()
        logger.info("Sessions shut down")
