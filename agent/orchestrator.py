"""
Chat turn orchestration.

One turn runs the conversation through sanitization, approval resolution and
the optional result transform, projects it onto model messages, and streams
the model's response. Resolution chunks and inference chunks share a single
response stream; resolution always completes before inference starts.
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Collection, Sequence

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.toolsets import AbstractToolset

from config import DEFAULT_MAX_STEPS
from core import (
    AssistantMessageBuilder,
    Chunk,
    Executor,
    InvalidOperationError,
    Message,
    StreamAbortedError,
    UIMessageStreamWriter,
    cleanup_messages,
    create_ui_message_stream,
    gen_id,
    process_tool_calls,
    to_model_messages,
)

from .wrapper import InferenceStream

logger = logging.getLogger(__name__)


@dataclass
class FinishResult:
    """Outcome of a turn, handed to the finish callback."""

    message: Message
    tool_call_count: int
    finish_reason: str
    usage: Any = None


OnFinish = Callable[[FinishResult], Awaitable[None]]
OnResolved = Callable[[list[Message]], Awaitable[None]]
Transform = Callable[[list[Message]], list[Message]]


async def _inference_chunks(
    inference: InferenceStream,
    message_id: str,
    abort_signal: asyncio.Event | None,
    on_finish: OnFinish,
) -> AsyncIterator[Chunk]:
    builder = AssistantMessageBuilder(message_id)

    def result() -> FinishResult:
        return FinishResult(
            message=builder.build(),
            tool_call_count=builder.tool_call_count,
            finish_reason=inference.finish_reason,
            usage=inference.usage,
        )

    try:
        async for chunk in inference.chunks(message_id, abort_signal):
            builder.apply(chunk)
            yield chunk
    except StreamAbortedError:
        inference.finish_reason = "abort"
        await on_finish(result())
        raise

    await on_finish(result())


def stream_chat_response(
    *,
    messages: list[Message],
    agent: Agent[Any, Any],
    executions: Mapping[str, Executor | None],
    on_finish: OnFinish,
    abort_signal: asyncio.Event | None = None,
    on_resolved: OnResolved | None = None,
    transform: Transform | None = None,
    toolsets: Sequence[AbstractToolset[Any]] | None = None,
    deps: Any = None,
    max_steps: int = DEFAULT_MAX_STEPS,
    model: Model | str | None = None,
    static_tool_names: Collection[str] | None = None,
) -> AsyncIterator[Chunk]:
    """
    Stream the response to a chat turn.

    Args:
        messages: Stored conversation history, newest last
        agent: Agent holding the instructions and local tools
        executions: Executors for tools that require approval
        on_finish: Called with the assembled assistant message once inference
            ends, including when it is aborted
        abort_signal: Event that, once set, cancels inference
        on_resolved: Called with the history after approvals were resolved and
            before inference starts
        transform: Rewrites the resolved history before it is projected
        toolsets: Extra toolsets (remote tool providers) for this turn
        deps: Dependencies passed to local tools
        max_steps: Model request budget for the turn
        model: Overrides the agent's model
        static_tool_names: Tools declared by the agent itself; calls to other
            tools are streamed as dynamic. ``None`` treats every tool as static.

    Returns:
        Async iterator of UI chunks. Failures end it with an ``error`` chunk,
        aborts with an ``abort`` chunk.
    """
    message_id = gen_id("msg_")

    async def execute(writer: UIMessageStreamWriter) -> None:
        cleaned = cleanup_messages(messages)
        resolved = await process_tool_calls(cleaned, executions, writer)
        if on_resolved is not None:
            await on_resolved(resolved)

        history = transform(resolved) if transform is not None else resolved
        model_messages = to_model_messages(history)
        if not model_messages:
            raise InvalidOperationError("Conversation has no messages to respond to")

        logger.info(
            "Running inference over %d message(s) (%d after cleanup)",
            len(messages),
            len(cleaned),
        )
        inference = InferenceStream(
            agent=agent,
            history=model_messages,
            toolsets=toolsets,
            deps=deps,
            max_steps=max_steps,
            model=model,
            static_tool_names=static_tool_names,
        )
        writer.merge(_inference_chunks(inference, message_id, abort_signal, on_finish))

    return create_ui_message_stream(execute)
