"""
Conversation update SSE endpoint.
"""

import json
from typing import Any, AsyncGenerator

from fastapi import APIRouter, Query
from sse_starlette.sse import EventSourceResponse

from ..event_bus import get_event_bus


router = APIRouter()


def matches(event: dict[str, Any], agent: str | None, name: str | None) -> bool:
    """Whether an event concerns the requested agent type and conversation."""
    properties = event.get("properties", {})
    if agent is not None and properties.get("agent") != agent:
        return False
    return name is None or properties.get("name") == name


@router.get("/global/event")
async def global_event(
    agent: str | None = Query(None), name: str | None = Query(None)
) -> EventSourceResponse:
    """Stream ``messages.updated`` events, optionally for one conversation."""
    event_bus = get_event_bus()
    queue = event_bus.subscribe()

    async def updates() -> AsyncGenerator[dict, None]:
        try:
            while True:
                event = await queue.get()
                if matches(event, agent, name):
                    yield {"event": event["type"], "data": json.dumps(event)}
        finally:
            event_bus.unsubscribe(queue)

    return EventSourceResponse(updates())
