"""
Tool call approval endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from core import InvalidOperationError, NotFoundError, ToolPart

from ...requests import DecisionRequest
from .common import get_session_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/agents/{agent}/{name}/tool-calls/{toolCallId}/decision")
async def decide_tool_call_route(
    agent: str, name: str, toolCallId: str, request: DecisionRequest
) -> ToolPart:
    """Approve or deny a tool call; the next chat turn executes or rejects it."""
    session = get_session_or_404(agent, name)
    try:
        return await session.decide_tool_call(toolCallId, request.approved)
    except NotFoundError:
        logger.debug("Tool call not found: %s", toolCallId)
        raise HTTPException(status_code=404, detail="Tool call not found")
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))
