"""
In-memory conversation storage.

Holds each conversation's message list, keyed by ``<agent>/<name>``. Callers
load a copy at the start of a request and save the new list at the end; a
per-conversation lock keeps two turns of the same conversation from
interleaving. In a production system this could be replaced with a
database-backed implementation of the same methods.
"""

import asyncio
import logging

from .models import Message

logger = logging.getLogger(__name__)


class ConversationStore:
    """Keyed store of conversation message lists."""

    def __init__(self) -> None:
        self._messages: dict[str, list[Message]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def load(self, key: str) -> list[Message]:
        """Return a deep copy of the stored messages (empty if unknown)."""
        return [message.model_copy(deep=True) for message in self._messages.get(key, [])]

    def save(self, key: str, messages: list[Message]) -> None:
        """Replace the stored messages of a conversation."""
        self._messages[key] = [message.model_copy(deep=True) for message in messages]
        logger.debug("Saved %d message(s) for %s", len(messages), key)

    def delete(self, key: str) -> None:
        """Forget a conversation."""
        self._messages.pop(key, None)

    def lock(self, key: str) -> asyncio.Lock:
        """Get the lock serializing turns of a conversation."""
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def clear(self) -> None:
        """Drop every conversation."""
        self._messages.clear()
        self._locks.clear()


# Global store instance
conversation_store = ConversationStore()
