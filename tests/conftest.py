"""
Shared pytest fixtures for all tests.
"""
import asyncio
import json
from typing import Any, Iterator

import pytest
from pydantic_ai.messages import ModelMessage, ModelRequest, ToolReturnPart
from pydantic_ai.models.function import AgentInfo, DeltaToolCall, FunctionModel

from config import Config
from core import (
    ConversationStore,
    Message,
    StepStartPart,
    TextPart,
    ToolPart,
    UIMessageStreamWriter,
)


@pytest.fixture
def config() -> Config:
    """Default configuration, independent of config files on disk."""
    return Config()


@pytest.fixture
def store() -> Iterator[ConversationStore]:
    """A fresh conversation store."""
    conversations = ConversationStore()
    yield conversations
    conversations.clear()


class RecordingWriter(UIMessageStreamWriter):
    """Stream writer that keeps every written chunk in ``chunks``."""

    def __init__(self) -> None:
        super().__init__(asyncio.Queue())
        self.chunks: list[dict[str, Any]] = []

    def write(self, chunk: dict[str, Any]) -> None:
        self.chunks.append(chunk)
        super().write(chunk)


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


def user(text: str, id: str = "u1") -> Message:
    return Message(id=id, role="user", parts=[TextPart(text=text)])


def tool_call(
    tool_name: str = "get_weather_information",
    tool_call_id: str = "call_1",
    state: str = "input-available",
    output: Any = None,
    input: Any = None,
    error_text: str | None = None,
    id: str = "a1",
) -> Message:
    """An assistant message holding one step with a single static tool call."""
    return Message(
        id=id,
        role="assistant",
        parts=[
            StepStartPart(),
            ToolPart(
                toolName=tool_name,
                toolCallId=tool_call_id,
                state=state,
                input=input if input is not None else {"city": "Paris"},
                output=output,
                errorText=error_text,
            ),
        ],
    )


# =============================================================================
# Scripted models
# =============================================================================


def text_model(*deltas: str) -> FunctionModel:
    """A model answering every request with the given text deltas."""

    async def stream(messages: list[ModelMessage], info: AgentInfo):
        for delta in deltas:
            yield delta

    return FunctionModel(stream_function=stream)


def last_tool_returns(messages: list[ModelMessage]) -> list[ToolReturnPart]:
    last = messages[-1]
    if not isinstance(last, ModelRequest):
        return []
    return [part for part in last.parts if isinstance(part, ToolReturnPart)]


def tool_calling_model(
    tool_name: str, args: dict[str, Any], tool_call_id: str = "call_1"
) -> tuple[FunctionModel, list[list[ModelMessage]]]:
    """
    A model calling one tool, then answering ``Result: <tool output>``.

    Returns the model and the list of every history it was sent.
    """
    seen: list[list[ModelMessage]] = []

    async def stream(messages: list[ModelMessage], info: AgentInfo):
        seen.append(list(messages))
        returns = last_tool_returns(messages)
        if returns:
            yield f"Result: {returns[0].content}"
        else:
            yield {
                0: DeltaToolCall(
                    name=tool_name, json_args=json.dumps(args), tool_call_id=tool_call_id
                )
            }

    return FunctionModel(stream_function=stream), seen
