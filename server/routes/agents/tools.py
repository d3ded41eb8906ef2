"""
Tool listing endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from .common import get_session_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/agents/{agent}/{name}/tools")
async def list_tools_route(agent: str, name: str) -> dict[str, dict]:
    """List the tools the model can call in this conversation."""
    session = get_session_or_404(agent, name)
    try:
        return await session.list_tools()
    except Exception as e:
        logger.exception("Failed to list tools for %s/%s", agent, name)
        raise HTTPException(status_code=502, detail=f"Failed to list tools: {e}")
