"""Local tools for the assistant agent."""

from pydantic_ai import Tool

from core import ExecutionRegistry

from .local_time import get_local_time
from .scheduling import ScheduleInput, cancel_scheduled_task, get_scheduled_tasks, schedule_task
from .weather import execute_weather, fetch_weather, get_weather_information

ASSISTANT_TOOLS: list[Tool] = [
    Tool(get_weather_information, requires_approval=True),
    Tool(get_local_time),
    Tool(schedule_task),
    Tool(get_scheduled_tasks),
    Tool(cancel_scheduled_task),
]

ASSISTANT_TOOL_NAMES = frozenset(tool.name for tool in ASSISTANT_TOOLS)


def assistant_executions() -> ExecutionRegistry:
    """Executors run once the user approves a call, keyed by tool name."""
    return ExecutionRegistry(
        {"get_weather_information": execute_weather},
        known_tools=ASSISTANT_TOOL_NAMES,
    )


__all__ = [
    "ASSISTANT_TOOLS",
    "ASSISTANT_TOOL_NAMES",
    "assistant_executions",
    "ScheduleInput",
    "schedule_task",
    "get_scheduled_tasks",
    "cancel_scheduled_task",
    "get_local_time",
    "get_weather_information",
    "execute_weather",
    "fetch_weather",
]
