"""
Agent package.

Builds the pydantic-ai agents, runs chat turns against them and keeps the
per-conversation sessions.
"""

from .agent import create_agent, resolve_model
from .formatting import format_flight_results, transform_flight_results
from .mcp import MCPClientManager
from .orchestrator import FinishResult, stream_chat_response
from .registry import AGENT_TYPES, SessionRegistry
from .sessions import AssistantAgent, ChatAgentSession, FlightAgent
from .wrapper import InferenceStream

__all__ = [
    "create_agent",
    "resolve_model",
    "InferenceStream",
    "FinishResult",
    "stream_chat_response",
    "format_flight_results",
    "transform_flight_results",
    "MCPClientManager",
    "ChatAgentSession",
    "AssistantAgent",
    "FlightAgent",
    "AGENT_TYPES",
    "SessionRegistry",
]
