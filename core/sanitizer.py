"""
History sanitization.

Removes messages whose tool calls never completed so they are not replayed
to the model.
"""

import logging

from .models import Message, ToolPart

logger = logging.getLogger(__name__)


def _is_incomplete(part: object) -> bool:
    if not isinstance(part, ToolPart):
        return False
    if part.state == "input-streaming":
        return True
    return part.state == "input-available" and not part.output and not part.errorText


def cleanup_messages(messages: list[Message]) -> list[Message]:
    """
    Drop every message holding an interrupted or unanswered tool call.

    A message is dropped when one of its static tool parts is still streaming
    its input, or has its input but neither an output nor an error text.
    Surviving messages are returned as-is and in their original order.

    Args:
        messages: Conversation history

    Returns:
        The filtered history
    """
    cleaned = [
        message
        for message in messages
        if not any(_is_incomplete(part) for part in message.parts)
    ]
    dropped = len(messages) - len(cleaned)
    if dropped:
        logger.debug("Dropped %d message(s) with incomplete tool calls", dropped)
    return cleaned
