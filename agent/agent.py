"""
Pydantic AI agent construction.

Each chat agent type gets one pydantic-ai Agent holding its instructions and
local tools. Remote toolsets, the model request budget and the abort signal
are supplied per run.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from pydantic_ai import Agent, DeferredToolRequests, Tool
from pydantic_ai.models import Model

from config import DEFAULT_PROVIDER

logger = logging.getLogger(__name__)


def resolve_model(model: Model | str) -> Model | str:
    """
    Qualify a bare model ID with the default provider.

    ``claude-sonnet-4-20250514`` becomes ``anthropic:claude-sonnet-4-20250514``;
    qualified names and Model instances are returned unchanged.
    """
    if isinstance(model, str) and ":" not in model:
        return f"{DEFAULT_PROVIDER}:{model}"
    return model


def create_agent(
    model: Model | str,
    system_prompt: str,
    tools: Sequence[Tool[Any]] = (),
    deps_type: type[Any] = type(None),
) -> Agent[Any, str | DeferredToolRequests]:
    """
    Create a pydantic-ai agent for a chat agent type.

    Tools declared with ``requires_approval=True`` are never run by the model
    loop: the run ends with a DeferredToolRequests output listing them, and
    their execution happens once a human decision comes back.

    Args:
        model: Model instance or model name
        system_prompt: Static instructions for the agent
        tools: Local tools exposed to the model
        deps_type: Type of the dependencies passed to tools

    Returns:
        Configured pydantic-ai Agent
    """
    agent: Agent[Any, str | DeferredToolRequests] = Agent(
        resolve_model(model),
        instructions=system_prompt,
        tools=tools,
        deps_type=deps_type,
        output_type=[str, DeferredToolRequests],
    )

    @agent.instructions
    def current_date_time() -> str:
        return f"Current date and time: {datetime.now(timezone.utc).isoformat()}"

    logger.debug("Created agent with %d local tool(s)", len(tools))
    return agent
