"""
Server-side state management.

Holds the session registry used by the routes. Conversation storage itself
lives in core/state.py.
"""

from agent import SessionRegistry

from .event_bus import get_event_bus


_sessions: SessionRegistry | None = None


def get_sessions() -> SessionRegistry:
    """Get the session registry, creating it on first use."""
    global _sessions
    if _sessions is None:
        _sessions = SessionRegistry(event_bus=get_event_bus())
    return _sessions


def set_sessions(registry: SessionRegistry | None) -> None:
    """Replace the session registry (``None`` resets it)."""
    global _sessions
    _sessions = registry
