"""HTTP middleware for request logging."""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Slow request threshold in milliseconds
SLOW_REQUEST_THRESHOLD_MS = 1000

_CONVERSATION_PATH = re.compile(r"^/agents/(?P<agent>[^/]+)/(?P<name>[^/]+)")


def conversation_tag(path: str) -> str:
    """Return ``[agent/name] `` for conversation routes, empty otherwise."""
    match = _CONVERSATION_PATH.match(path)
    if not match:
        return ""
    return f"[{match['agent']}/{match['name']}] "


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its status and timing.

    Conversation routes are tagged with the agent type and conversation
    name. Streaming responses are timed until their headers are sent.

    Log levels:
    - DEBUG: Request start
    - INFO: Successful responses
    - WARNING: 4xx errors, slow requests (>1s)
    - ERROR: 5xx errors
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        tag = conversation_tag(request.url.path)

        logger.debug("%s%s %s", tag, request.method, request.url.path)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._log_response(tag, request, response, duration_ms)
        return response

    def _log_response(
        self, tag: str, request: Request, response: Response, duration_ms: float
    ) -> None:
        method = request.method
        path = request.url.path
        status = response.status_code

        if status >= 500:
            logger.error("%s%s %s -> %d (%.1fms)", tag, method, path, status, duration_ms)
        elif status >= 400:
            logger.warning("%s%s %s -> %d (%.1fms)", tag, method, path, status, duration_ms)
        elif duration_ms > SLOW_REQUEST_THRESHOLD_MS:
            logger.warning(
                "%s%s %s -> %d (%.1fms) SLOW", tag, method, path, status, duration_ms
            )
        else:
            logger.info("%s%s %s -> %d (%.1fms)", tag, method, path, status, duration_ms)
