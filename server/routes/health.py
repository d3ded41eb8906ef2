"""
Health check endpoint.
"""

from fastapi import APIRouter

from agent import AGENT_TYPES

from ..state import get_sessions


router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "agents": sorted(AGENT_TYPES),
        "sessions": len(get_sessions().list()),
    }
