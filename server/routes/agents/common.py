"""
Session lookup shared by the conversation routes.
"""

from fastapi import HTTPException

from agent import ChatAgentSession
from core import NotFoundError

from ...state import get_sessions


def get_session_or_404(agent: str, name: str) -> ChatAgentSession:
    """Resolve the session of a conversation, mapping unknown agent types to 404."""
    try:
        return get_sessions().get(agent, name)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Agent not found: {agent}")
