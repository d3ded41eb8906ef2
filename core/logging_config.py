"""
Logging setup for the chat agent server.

Every record is stamped with the key of the conversation whose turn emitted
it (``chat/default``, ``flight/trip``), so the resolver, tool and MCP logs
of interleaved turns can be told apart. Records emitted outside a turn carry
``-``.
"""

import contextvars
import logging
import os
import sys
import time
from contextlib import contextmanager
from functools import wraps
from typing import Callable, Generator, Iterator, Optional, TypeVar

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(conversation)s | %(name)s | %(message)s"
DEBUG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(conversation)s"
    " | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
)

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
NO_CONVERSATION = "-"

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "mcp", "fastmcp", "sse_starlette", "uvicorn.access")

T = TypeVar("T")

_conversation: contextvars.ContextVar[str] = contextvars.ContextVar(
    "conversation", default=NO_CONVERSATION
)


class ConversationFilter(logging.Filter):
    """Adds the current conversation key to each record as ``conversation``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.conversation = _conversation.get()
        return True


def current_conversation() -> str:
    return _conversation.get()


@contextmanager
def conversation_context(key: str) -> Iterator[None]:
    """Attribute records logged inside the block, and tasks it starts, to ``key``."""
    previous = _conversation.get()
    _conversation.set(key)
    try:
        yield
    finally:
        # A streamed turn may be closed from another context, where reset(token) raises
        _conversation.set(previous)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure logging for the server process.

    Args:
        level: Log level override. If not provided, uses LOG_LEVEL env var or INFO.
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=DEBUG_FORMAT if log_level == logging.DEBUG else LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(ConversationFilter())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)


@contextmanager
def log_timing(
    logger: logging.Logger, operation: str, level: int = logging.DEBUG
) -> Generator[None, None, None]:
    """Log how long the wrapped block took, and whether it raised.

    Example:
        with log_timing(logger, "Tool get_weather_information (call_1)"):
            result = await executor(args, context)
    """
    start = time.perf_counter()
    try:
        yield
    except Exception:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.log(max(level, logging.WARNING), "%s failed after %.1fms", operation, duration_ms)
        raise
    duration_ms = (time.perf_counter() - start) * 1000
    logger.log(level, "%s completed in %.1fms", operation, duration_ms)


def timed(
    operation: Optional[str] = None, level: int = logging.DEBUG
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator applying ``log_timing`` to every call of an async function."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        op_name = operation or func.__name__
        logger = logging.getLogger(func.__module__)

        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            with log_timing(logger, op_name, level):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
