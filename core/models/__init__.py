"""
Domain models for the chat agent.

These are the conversation structures shared by every component.
"""

from .message import Message, MessageMetadata
from .part import DynamicToolPart, Part, ReasoningPart, StepStartPart, TextPart, ToolPart
from .tool_state import Approval, ToolState, is_approval_sentinel
from .utils import gen_id

__all__ = [
    # Utils
    "gen_id",
    # Message models
    "Message",
    "MessageMetadata",
    # Part models
    "TextPart",
    "ReasoningPart",
    "StepStartPart",
    "ToolPart",
    "DynamicToolPart",
    "Part",
    # Tool state
    "ToolState",
    "Approval",
    "is_approval_sentinel",
]
