"""
Projection of conversation messages onto pydantic-ai model messages.

Assistant messages are split at their step-start markers: every step becomes
one ModelResponse carrying its text and tool calls, followed by a ModelRequest
carrying the results of those calls.
"""

from typing import Any

from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelRequestPart,
    ModelResponse,
    ModelResponsePart,
    SystemPromptPart,
    TextPart as ModelTextPart,
    ThinkingPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)

from .models import DynamicToolPart, Message, ReasoningPart, StepStartPart, TextPart, ToolPart


def _has_result(part: ToolPart | DynamicToolPart) -> bool:
    return (
        part.state in ("output-available", "output-error")
        or part.output is not None
        or part.errorText is not None
    )


def _tool_result_content(part: ToolPart | DynamicToolPart) -> Any:
    if part.state == "output-error" or (part.errorText and part.output is None):
        return part.errorText
    return part.output


def _split_steps(message: Message) -> list[list[Any]]:
    steps: list[list[Any]] = [[]]
    for part in message.parts:
        if isinstance(part, StepStartPart):
            if steps[-1]:
                steps.append([])
            continue
        steps[-1].append(part)
    return [step for step in steps if step]


def _project_assistant(message: Message) -> list[ModelMessage]:
    projected: list[ModelMessage] = []
    for step in _split_steps(message):
        response_parts: list[ModelResponsePart] = []
        return_parts: list[ModelRequestPart] = []
        for part in step:
            if isinstance(part, TextPart):
                if part.text:
                    response_parts.append(ModelTextPart(content=part.text))
            elif isinstance(part, ReasoningPart):
                if part.text:
                    response_parts.append(ThinkingPart(content=part.text))
            elif isinstance(part, (ToolPart, DynamicToolPart)):
                if not _has_result(part):
                    continue
                response_parts.append(
                    ToolCallPart(
                        tool_name=part.toolName,
                        args=part.input if isinstance(part.input, dict) else {},
                        tool_call_id=part.toolCallId,
                    )
                )
                return_parts.append(
                    ToolReturnPart(
                        tool_name=part.toolName,
                        content=_tool_result_content(part),
                        tool_call_id=part.toolCallId,
                    )
                )
        if response_parts:
            projected.append(ModelResponse(parts=response_parts))
        if return_parts:
            projected.append(ModelRequest(parts=return_parts))
    return projected


def _project(message: Message) -> list[ModelMessage]:
    if message.role == "assistant":
        return _project_assistant(message)

    texts = [part.text for part in message.parts if isinstance(part, TextPart) and part.text]
    if not texts:
        return []
    if message.role == "system":
        return [ModelRequest(parts=[SystemPromptPart(content="\n".join(texts))])]
    return [ModelRequest(parts=[UserPromptPart(content=text) for text in texts])]


def to_model_messages(messages: list[Message]) -> list[ModelMessage]:
    """
    Convert conversation messages into the history format of the model.

    Consecutive requests (for example tool results followed by a new user
    prompt) are merged into a single ModelRequest, and consecutive responses
    into a single ModelResponse, so that roles alternate.

    Args:
        messages: Conversation messages, already sanitized

    Returns:
        The pydantic-ai message history
    """
    history: list[ModelMessage] = []
    for message in messages:
        for projected in _project(message):
            previous = history[-1] if history else None
            if isinstance(previous, ModelRequest) and isinstance(projected, ModelRequest):
                history[-1] = ModelRequest(parts=[*previous.parts, *projected.parts])
            elif isinstance(previous, ModelResponse) and isinstance(projected, ModelResponse):
                history[-1] = ModelResponse(parts=[*previous.parts, *projected.parts])
            else:
                history.append(projected)
    return history
