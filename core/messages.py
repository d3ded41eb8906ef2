"""
Message operations.

Pure functions building and rewriting conversation message lists. Sessions
apply them between loading and saving a conversation.
"""

import logging

from .exceptions import InvalidOperationError, NotFoundError
from .models import Approval, Message, TextPart, ToolPart, gen_id

logger = logging.getLogger(__name__)


def user_message(text: str) -> Message:
    """Create a user message with a single text part, a fresh id and timestamp."""
    return Message(id=gen_id("msg_"), role="user", parts=[TextPart(text=text)])


def scheduled_task_message(description: str) -> Message:
    """Create the user message recording that a scheduled task fired."""
    return user_message(f"Running scheduled task: {description}")


def find_tool_part(messages: list[Message], tool_call_id: str) -> tuple[Message, ToolPart]:
    """
    Find a static tool part by call id.

    Raises:
        NotFoundError: If no tool part carries that call id
    """
    for message in messages:
        for part in message.parts:
            if isinstance(part, ToolPart) and part.toolCallId == tool_call_id:
                return message, part
    raise NotFoundError("Tool call", tool_call_id)


def record_tool_decision(
    messages: list[Message], tool_call_id: str, approved: bool
) -> list[Message]:
    """
    Record a human decision on a tool call awaiting approval.

    The part moves from ``input-available`` to ``output-available`` with an
    approval sentinel as output; the next turn resolves it.

    Args:
        messages: Conversation history
        tool_call_id: The tool call being decided
        approved: Whether the user approved the call

    Returns:
        The history with the decision recorded

    Raises:
        NotFoundError: If the tool call does not exist
        InvalidOperationError: If the tool call is not awaiting a decision
    """
    message, part = find_tool_part(messages, tool_call_id)
    if part.state != "input-available" or part.output is not None or part.errorText:
        raise InvalidOperationError(
            f"Tool call {tool_call_id} is not awaiting a decision (state: {part.state})"
        )

    decision = Approval.YES if approved else Approval.NO
    logger.info("Recorded decision for tool call %s: %s", tool_call_id, decision.value)
    decided = part.model_copy(update={"state": "output-available", "output": decision.value})
    updated = message.model_copy(
        update={"parts": [decided if p is part else p for p in message.parts]}
    )
    return [updated if m is message else m for m in messages]


def apply_resolved_parts(messages: list[Message], resolved: list[Message]) -> list[Message]:
    """
    Copy tool outputs resolved on a filtered history back onto the full one.

    Messages removed by sanitization keep their stored form; every static
    tool part whose output changed in ``resolved`` is replaced by its call id.
    """
    updates: dict[str, ToolPart] = {}
    for message in resolved:
        for part in message.parts:
            if isinstance(part, ToolPart):
                updates[part.toolCallId] = part

    rewritten: list[Message] = []
    for message in messages:
        parts = [
            updates[part.toolCallId]
            if isinstance(part, ToolPart)
            and part.toolCallId in updates
            and updates[part.toolCallId].output != part.output
            else part
            for part in message.parts
        ]
        changed = any(new is not old for new, old in zip(parts, message.parts))
        rewritten.append(message.model_copy(update={"parts": parts}) if changed else message)
    return rewritten
