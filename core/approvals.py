"""
Human-in-the-loop tool approval.

Tools listed in an ExecutionRegistry are never run by the model loop. The
model only proposes the call; a client answers it by writing an approval
sentinel into the part's output, and the next turn resolves those answers
here before the conversation goes back to the model.
"""

import asyncio
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic_ai.messages import ModelMessage

from .exceptions import InvalidOperationError
from .logging_config import log_timing
from .models import Approval, Message, ToolPart, is_approval_sentinel
from .projection import to_model_messages
from .streaming import UIMessageStreamWriter

logger = logging.getLogger(__name__)

NO_EXECUTOR_RESULT = "Error: No execute function found on tool"
DENIED_RESULT = "Error: User denied access to tool execution"


@dataclass
class ToolExecutionContext:
    """Context handed to an approved tool's executor."""

    messages: list[ModelMessage]
    tool_call_id: str


Executor = Callable[[Any, ToolExecutionContext], Awaitable[Any]]


class ExecutionRegistry(Mapping[str, Executor]):
    """
    Mapping from tool name to the executor run once a human approves a call.

    The registry is checked against the tools the agent actually exposes when
    it is built, so a typo in a tool name fails at startup instead of leaving
    a call forever unresolved.
    """

    def __init__(
        self,
        executions: Mapping[str, Executor] | None = None,
        known_tools: Iterable[str] | None = None,
    ):
        self._executions: dict[str, Executor] = dict(executions or {})
        if known_tools is not None:
            unknown = sorted(set(self._executions) - set(known_tools))
            if unknown:
                raise InvalidOperationError(
                    f"Executors registered for unknown tools: {', '.join(unknown)}"
                )

    def __getitem__(self, name: str) -> Executor:
        return self._executions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._executions)

    def __len__(self) -> int:
        return len(self._executions)


async def _run_executor(
    part: ToolPart, executor: Executor | None, model_messages: list[ModelMessage]
) -> Any:
    if executor is None:
        logger.warning("No executor registered for approved tool %s", part.toolName)
        return NO_EXECUTOR_RESULT

    context = ToolExecutionContext(messages=model_messages, tool_call_id=part.toolCallId)
    try:
        with log_timing(logger, f"Tool {part.toolName} ({part.toolCallId})"):
            return await executor(part.input, context)
    except Exception as e:
        logger.exception("Approved tool %s failed", part.toolName)
        return f"Error: {part.toolName} failed: {e}"


async def process_tool_calls(
    messages: list[Message],
    executions: Mapping[str, Executor | None],
    writer: UIMessageStreamWriter,
) -> list[Message]:
    """
    Resolve approval decisions recorded in the conversation.

    Every static tool part of a registered tool whose output is an approval
    sentinel is resolved: approved calls run their executor, denied calls get
    a denial message. Each resolved output is written to ``writer`` as a
    ``tool-output-available`` chunk before this function returns. All other
    parts, including parts that already hold a real result, are left alone.

    Args:
        messages: Sanitized conversation history
        executions: Registry of executors for tools that require approval
        writer: Response stream receiving the resolved outputs

    Returns:
        The history with resolved outputs, in the original order
    """
    model_messages: list[ModelMessage] | None = None

    def get_model_messages() -> list[ModelMessage]:
        nonlocal model_messages
        if model_messages is None:
            model_messages = to_model_messages(messages)
        return model_messages

    async def process_part(part: Any) -> Any:
        if not isinstance(part, ToolPart):
            return part
        if part.toolName not in executions or part.state != "output-available":
            return part
        if not is_approval_sentinel(part.output):
            return part

        if part.output == Approval.YES:
            logger.info("Executing approved tool %s (%s)", part.toolName, part.toolCallId)
            result = await _run_executor(
                part, executions.get(part.toolName), get_model_messages()
            )
        else:
            logger.info("Tool %s (%s) denied by user", part.toolName, part.toolCallId)
            result = DENIED_RESULT

        writer.write(
            {
                "type": "tool-output-available",
                "toolCallId": part.toolCallId,
                "output": result,
            }
        )
        return part.model_copy(update={"output": result})

    async def process_message(message: Message) -> Message:
        if not message.parts:
            return message
        parts = await asyncio.gather(*(process_part(part) for part in message.parts))
        if all(new is old for new, old in zip(parts, message.parts)):
            return message
        return message.model_copy(update={"parts": list(parts)})

    return list(await asyncio.gather(*(process_message(message) for message in messages)))
