"""
Abort endpoint.
"""

from fastapi import APIRouter

from .common import get_session_or_404


router = APIRouter()


@router.post("/agents/{agent}/{name}/abort")
async def abort_route(agent: str, name: str) -> bool:
    """Abort the running turn. Returns False if none was running."""
    return get_session_or_404(agent, name).abort()
