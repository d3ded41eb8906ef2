"""
Conversation history endpoints.
"""

from fastapi import APIRouter

from core import Message

from .common import get_session_or_404


router = APIRouter()


@router.get("/agents/{agent}/{name}/messages")
async def list_messages_route(agent: str, name: str) -> list[Message]:
    """Get the stored conversation."""
    return get_session_or_404(agent, name).messages


@router.delete("/agents/{agent}/{name}/messages")
async def clear_messages_route(agent: str, name: str) -> bool:
    """Clear the stored conversation."""
    await get_session_or_404(agent, name).clear()
    return True
