"""
UI message stream plumbing.

A response stream is an ordered sequence of chunk dicts (``{"type": ...}``)
fed through one queue. Producers write single chunks or merge whole async
streams into it; the consumer iterates the chunks until every producer is
done.
"""

import asyncio
import contextlib
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

from .exceptions import StreamAbortedError

logger = logging.getLogger(__name__)

Chunk = dict[str, Any]

_DONE = object()


class UIMessageStreamWriter:
    """
    Single-writer handle on a response stream.

    ``write`` appends a chunk immediately. ``merge`` forwards another async
    stream into this one from a background task; ``wait`` joins those tasks.
    """

    def __init__(self, queue: asyncio.Queue[Any]) -> None:
        self._queue = queue
        self._merges: list[asyncio.Task[None]] = []

    def write(self, chunk: Chunk) -> None:
        """Append a chunk to the stream."""
        self._queue.put_nowait(chunk)

    def merge(self, stream: AsyncIterator[Chunk]) -> None:
        """Forward every chunk of ``stream`` into this stream."""
        self._merges.append(asyncio.create_task(self._forward(stream)))

    async def _forward(self, stream: AsyncIterator[Chunk]) -> None:
        async for chunk in stream:
            self.write(chunk)

    async def wait(self) -> None:
        """Wait until every merged stream is exhausted, re-raising its error."""
        while self._merges:
            task = self._merges.pop(0)
            await task

    def cancel(self) -> None:
        """Cancel merged streams that are still running."""
        for task in self._merges:
            task.cancel()


async def create_ui_message_stream(
    execute: Callable[[UIMessageStreamWriter], Awaitable[None]],
) -> AsyncIterator[Chunk]:
    """
    Run ``execute`` against a fresh writer and yield the chunks it produces.

    Errors raised by ``execute`` or by a merged stream end the stream with an
    ``error`` chunk; an abort ends it with an ``abort`` chunk. Chunks already
    yielded are never retracted.

    Args:
        execute: Coroutine function writing to and merging into the stream

    Yields:
        Chunk dicts in emission order
    """
    queue: asyncio.Queue[Any] = asyncio.Queue()
    writer = UIMessageStreamWriter(queue)

    async def run() -> None:
        try:
            await execute(writer)
            await writer.wait()
        except StreamAbortedError:
            logger.info("Response stream aborted")
            queue.put_nowait({"type": "abort"})
        except Exception as e:
            logger.exception("Error while producing response stream")
            queue.put_nowait({"type": "error", "errorText": str(e)})
        finally:
            writer.cancel()
            queue.put_nowait(_DONE)

    task = asyncio.create_task(run())
    try:
        while True:
            chunk = await queue.get()
            if chunk is _DONE:
                break
            yield chunk
    finally:
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


async def iterate_until_aborted(
    stream: AsyncIterator[Any], abort_signal: asyncio.Event | None
) -> AsyncIterator[Any]:
    """
    Iterate ``stream`` but stop as soon as ``abort_signal`` is set.

    The pending read is cancelled, then StreamAbortedError is raised.
    Closing ``stream`` is left to its owner.
    """
    if abort_signal is None:
        async for item in stream:
            yield item
        return

    iterator = aiter(stream)
    abort_wait = asyncio.ensure_future(abort_signal.wait())
    try:
        while True:
            next_item = asyncio.ensure_future(anext(iterator))
            done, _ = await asyncio.wait(
                {next_item, abort_wait}, return_when=asyncio.FIRST_COMPLETED
            )
            if next_item not in done:
                next_item.cancel()
                with contextlib.suppress(asyncio.CancelledError, StopAsyncIteration):
                    await next_item
                raise StreamAbortedError()
            try:
                item = next_item.result()
            except StopAsyncIteration:
                return
            yield item
    finally:
        abort_wait.cancel()
