"""
Assembly of the assistant message from response stream chunks.
"""

from typing import Any

from .models import (
    DynamicToolPart,
    Message,
    ReasoningPart,
    StepStartPart,
    TextPart,
    ToolPart,
    gen_id,
)
from .streaming import Chunk


class AssistantMessageBuilder:
    """
    Folds UI chunks into a single assistant Message.

    Text and reasoning deltas are appended to the part opened by their
    ``*-start`` chunk; tool chunks create or update the part of their call id.
    Chunks for calls this builder never saw (for example outputs of calls
    made in an earlier turn) are ignored.
    """

    def __init__(self, message_id: str | None = None) -> None:
        self.message = Message(id=message_id or gen_id("msg_"), role="assistant")
        self._text_parts: dict[str, TextPart | ReasoningPart] = {}
        self._tool_parts: dict[str, ToolPart | DynamicToolPart] = {}

    @property
    def tool_call_count(self) -> int:
        return len(self._tool_parts)

    def apply(self, chunk: Chunk) -> None:
        """Apply one chunk to the message under construction."""
        chunk_type = chunk.get("type")
        parts: list[Any] = self.message.parts

        if chunk_type == "start-step":
            parts.append(StepStartPart())

        elif chunk_type in ("text-start", "reasoning-start"):
            part: TextPart | ReasoningPart = (
                TextPart(text="") if chunk_type == "text-start" else ReasoningPart(text="")
            )
            self._text_parts[chunk["id"]] = part
            parts.append(part)

        elif chunk_type in ("text-delta", "reasoning-delta"):
            text_part = self._text_parts.get(chunk["id"])
            if text_part is not None:
                text_part.text += chunk.get("delta", "")

        elif chunk_type in ("tool-input-start", "tool-input-available"):
            tool_part = self._tool_parts.get(chunk["toolCallId"])
            state = "input-streaming" if chunk_type == "tool-input-start" else "input-available"
            if tool_part is None:
                part_class = DynamicToolPart if chunk.get("dynamic") else ToolPart
                tool_part = part_class(
                    toolName=chunk["toolName"],
                    toolCallId=chunk["toolCallId"],
                    state=state,
                    input=chunk.get("input"),
                )
                self._tool_parts[tool_part.toolCallId] = tool_part
                parts.append(tool_part)
            else:
                tool_part.state = state
                tool_part.input = chunk.get("input", tool_part.input)

        elif chunk_type == "tool-output-available":
            tool_part = self._tool_parts.get(chunk["toolCallId"])
            if tool_part is not None:
                tool_part.state = "output-available"
                tool_part.output = chunk.get("output")

        elif chunk_type == "tool-output-error":
            tool_part = self._tool_parts.get(chunk["toolCallId"])
            if tool_part is not None:
                tool_part.state = "output-error"
                tool_part.errorText = chunk.get("errorText")

    def build(self) -> Message:
        """Return the assembled message without empty text parts."""
        parts = [
            part
            for part in self.message.parts
            if not isinstance(part, (TextPart, ReasoningPart)) or part.text
        ]
        return self.message.model_copy(update={"parts": parts})
