"""
Core business logic package.

This package contains the transport-agnostic conversation pipeline: history
sanitization, approval resolution, projection onto model messages and the
response stream plumbing. The agent package drives it and the server package
exposes it over HTTP.
"""

from .approvals import (
    DENIED_RESULT,
    NO_EXECUTOR_RESULT,
    ExecutionRegistry,
    Executor,
    ToolExecutionContext,
    process_tool_calls,
)
from .events import Event, EventBus, NullEventBus
from .exceptions import CoreError, InvalidOperationError, NotFoundError, StreamAbortedError
from .message_builder import AssistantMessageBuilder
from .messages import (
    apply_resolved_parts,
    find_tool_part,
    record_tool_decision,
    scheduled_task_message,
    user_message,
)
from .models import (
    Approval,
    DynamicToolPart,
    Message,
    MessageMetadata,
    Part,
    ReasoningPart,
    StepStartPart,
    TextPart,
    ToolPart,
    ToolState,
    gen_id,
    is_approval_sentinel,
)
from .projection import to_model_messages
from .sanitizer import cleanup_messages
from .scheduler import Schedule, TaskScheduler
from .state import ConversationStore, conversation_store
from .streaming import (
    Chunk,
    UIMessageStreamWriter,
    create_ui_message_stream,
    iterate_until_aborted,
)

__all__ = [
    # Exceptions
    "CoreError",
    "NotFoundError",
    "InvalidOperationError",
    "StreamAbortedError",
    # Events
    "Event",
    "EventBus",
    "NullEventBus",
    # Models
    "Message",
    "MessageMetadata",
    "Part",
    "TextPart",
    "ReasoningPart",
    "StepStartPart",
    "ToolPart",
    "DynamicToolPart",
    "ToolState",
    "Approval",
    "is_approval_sentinel",
    "gen_id",
    # Pipeline
    "cleanup_messages",
    "process_tool_calls",
    "ExecutionRegistry",
    "Executor",
    "ToolExecutionContext",
    "NO_EXECUTOR_RESULT",
    "DENIED_RESULT",
    "to_model_messages",
    # Streaming
    "Chunk",
    "UIMessageStreamWriter",
    "create_ui_message_stream",
    "iterate_until_aborted",
    "AssistantMessageBuilder",
    # Message operations
    "user_message",
    "scheduled_task_message",
    "find_tool_part",
    "record_tool_decision",
    "apply_resolved_parts",
    # Storage and scheduling
    "ConversationStore",
    "conversation_store",
    "Schedule",
    "TaskScheduler",
]
