"""
SSE-based EventBus implementation.

Sessions publish ``messages.updated`` whenever a conversation is saved; every
client subscribed to ``/global/event`` receives the new message list.
"""

import asyncio
import logging
from typing import Any

from core import Event

logger = logging.getLogger(__name__)

# Events kept per subscriber before the oldest are dropped
MAX_PENDING_EVENTS = 100


class SSEEventBus:
    """
    EventBus implementation broadcasting to SSE subscribers.

    Each subscriber owns a bounded queue. A subscriber that stops reading
    loses its oldest events instead of blocking publishers.
    """

    def __init__(self) -> None:
        self.subscribers: list[asyncio.Queue[dict[str, Any]]] = []

    async def publish(self, event: Event) -> None:
        """Publish an event to all subscribers."""
        data = event.model_dump(mode="json")
        for queue in self.subscribers:
            if queue.full():
                queue.get_nowait()
                logger.warning("Subscriber lagging, dropped oldest %s event", event.type)
            queue.put_nowait(data)

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        """Create a subscription queue receiving every published event."""
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=MAX_PENDING_EVENTS)
        self.subscribers.append(queue)
        logger.debug("Event subscriber added (%d total)", len(self.subscribers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        """Remove a subscription queue."""
        if queue in self.subscribers:
            self.subscribers.remove(queue)


# Global event bus instance
_event_bus: SSEEventBus | None = None


def get_event_bus() -> SSEEventBus:
    """Get the global event bus instance, creating it if necessary."""
    global _event_bus
    if _event_bus is None:
        _event_bus = SSEEventBus()
    return _event_bus
