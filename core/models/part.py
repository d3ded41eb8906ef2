"""Part models."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from .tool_state import ToolState


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ReasoningPart(BaseModel):
    type: Literal["reasoning"] = "reasoning"
    text: str


class StepStartPart(BaseModel):
    type: Literal["step-start"] = "step-start"


class ToolPart(BaseModel):
    """Invocation of a tool declared in the agent's own tool set."""

    type: Literal["tool"] = "tool"
    toolName: str
    toolCallId: str
    state: ToolState
    input: Any = None
    output: Any = None
    errorText: str | None = None


class DynamicToolPart(BaseModel):
    """Invocation of a tool that was not known when the agent was built.

    These are never sanitized nor reconciled against the approval registry.
    """

    type: Literal["dynamic-tool"] = "dynamic-tool"
    toolName: str
    toolCallId: str
    state: ToolState
    input: Any = None
    output: Any = None
    errorText: str | None = None


Part = Annotated[
    TextPart | ReasoningPart | StepStartPart | ToolPart | DynamicToolPart,
    Field(discriminator="type"),
]
