"""
Adapter from pydantic-ai run events to UI message stream chunks.

Uses run_stream_events() to observe text, reasoning, tool calls and tool
results as they happen, and translates them into the chunk protocol consumed
by chat clients (``text-delta``, ``tool-input-available`` and so on).
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Collection, Sequence

from pydantic_ai import Agent, AgentRunResultEvent, DeferredToolRequests
from pydantic_ai.exceptions import UsageLimitExceeded
from pydantic_ai.messages import (
    FunctionToolCallEvent,
    FunctionToolResultEvent,
    ModelMessage,
    PartDeltaEvent,
    PartStartEvent,
    RetryPromptPart,
    TextPart,
    TextPartDelta,
    ThinkingPart,
    ThinkingPartDelta,
    ToolCallPart,
)
from pydantic_ai.models import Model
from pydantic_ai.toolsets import AbstractToolset
from pydantic_ai.usage import UsageLimits
from pydantic_core import to_jsonable_python

from config import DEFAULT_MAX_STEPS
from core import Chunk, gen_id, iterate_until_aborted

logger = logging.getLogger(__name__)


@dataclass
class InferenceStream:
    """
    One inference call against a conversation history.

    Iterate ``chunks()`` to run the model; afterwards ``finish_reason``,
    ``usage`` and ``tool_call_count`` describe the run.
    """

    agent: Agent[Any, Any]
    history: list[ModelMessage]
    toolsets: Sequence[AbstractToolset[Any]] | None = None
    deps: Any = None
    max_steps: int = DEFAULT_MAX_STEPS
    model: Model | str | None = None
    static_tool_names: Collection[str] | None = None

    finish_reason: str = "stop"
    usage: Any = None
    tool_call_count: int = 0
    _block_id: str | None = field(default=None, repr=False)
    _block_kind: str | None = field(default=None, repr=False)
    _step_pending: bool = field(default=False, repr=False)
    _seen_tool_calls: set[str] = field(default_factory=set, repr=False)

    def _is_dynamic(self, tool_name: str) -> bool:
        return self.static_tool_names is not None and tool_name not in self.static_tool_names

    def _close_block(self) -> list[Chunk]:
        if self._block_id is None:
            return []
        chunk = {"type": f"{self._block_kind}-end", "id": self._block_id}
        self._block_id = None
        self._block_kind = None
        return [chunk]

    def _delta(self, kind: str, content: str | None) -> list[Chunk]:
        chunks: list[Chunk] = []
        if self._block_kind != kind:
            chunks.extend(self._close_block())
            self._block_id = gen_id("blk_")
            self._block_kind = kind
            chunks.append({"type": f"{kind}-start", "id": self._block_id})
        if content:
            chunks.append({"type": f"{kind}-delta", "id": self._block_id, "delta": content})
        return chunks

    def _next_step(self) -> list[Chunk]:
        if not self._step_pending:
            return []
        self._step_pending = False
        return [*self._close_block(), {"type": "finish-step"}, {"type": "start-step"}]

    def _tool_call(self, part: ToolCallPart) -> list[Chunk]:
        if part.tool_call_id in self._seen_tool_calls:
            return []
        self._seen_tool_calls.add(part.tool_call_id)
        self.tool_call_count += 1
        logger.debug("Tool call: %s", part.tool_name)
        chunk: Chunk = {
            "type": "tool-input-available",
            "toolCallId": part.tool_call_id,
            "toolName": part.tool_name,
            "input": part.args_as_dict(),
        }
        if self._is_dynamic(part.tool_name):
            chunk["dynamic"] = True
        return [*self._close_block(), chunk]

    def _translate(self, event: Any) -> list[Chunk]:
        if isinstance(event, PartStartEvent):
            chunks = self._next_step()
            if isinstance(event.part, TextPart):
                chunks.extend(self._delta("text", event.part.content))
            elif isinstance(event.part, ThinkingPart):
                chunks.extend(self._delta("reasoning", event.part.content))
            return chunks

        if isinstance(event, PartDeltaEvent):
            if isinstance(event.delta, TextPartDelta):
                return self._delta("text", event.delta.content_delta)
            if isinstance(event.delta, ThinkingPartDelta):
                return self._delta("reasoning", event.delta.content_delta)
            return []

        if isinstance(event, FunctionToolCallEvent):
            return self._tool_call(event.part)

        if isinstance(event, FunctionToolResultEvent):
            self._step_pending = True
            result = event.part
            if isinstance(result, RetryPromptPart):
                return [
                    {
                        "type": "tool-output-error",
                        "toolCallId": result.tool_call_id,
                        "errorText": result.model_response(),
                    }
                ]
            return [
                {
                    "type": "tool-output-available",
                    "toolCallId": result.tool_call_id,
                    "output": to_jsonable_python(result.content, fallback=str),
                }
            ]

        if isinstance(event, AgentRunResultEvent):
            self.usage = event.result.usage
            output = event.result.output
            if isinstance(output, DeferredToolRequests):
                chunks = []
                for call in [*output.calls, *output.approvals]:
                    chunks.extend(self._tool_call(call))
                self.finish_reason = "tool-calls"
                return chunks

        return []

    async def chunks(
        self, message_id: str | None = None, abort_signal: asyncio.Event | None = None
    ) -> AsyncIterator[Chunk]:
        """
        Run the model and yield UI chunks as its events arrive.

        Args:
            message_id: ID of the assistant message being produced
            abort_signal: Event that, once set, cancels the run

        Yields:
            Chunks from ``start`` to ``finish``

        Raises:
            StreamAbortedError: If the abort signal fires during the run
        """
        logger.debug(
            "Starting inference over %d history message(s), budget %d step(s)",
            len(self.history),
            self.max_steps,
        )
        start: Chunk = {"type": "start"}
        if message_id:
            start["messageId"] = message_id
        yield start
        yield {"type": "start-step"}

        run_kwargs: dict[str, Any] = {
            "message_history": self.history,
            "deps": self.deps,
            "usage_limits": UsageLimits(request_limit=self.max_steps),
        }
        if self.toolsets:
            run_kwargs["toolsets"] = self.toolsets
        if self.model is not None:
            run_kwargs["model"] = self.model

        try:
            async with self.agent.run_stream_events(None, **run_kwargs) as events:
                async for event in iterate_until_aborted(events, abort_signal):
                    for chunk in self._translate(event):
                        yield chunk
        except UsageLimitExceeded as e:
            logger.warning("Stopping turn at step budget: %s", e)
            self.finish_reason = "tool-calls"

        for chunk in self._close_block():
            yield chunk
        yield {"type": "finish-step"}
        yield {"type": "finish", "finishReason": self.finish_reason}
        logger.debug("Inference complete: %d tool call(s)", self.tool_call_count)
