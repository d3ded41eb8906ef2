"""
Chat endpoint with streaming.
"""

import json
import logging
from typing import AsyncGenerator

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from core import user_message

from ...app import STREAM_PROTOCOL_HEADER
from ...requests import ChatRequest
from .common import get_session_or_404

logger = logging.getLogger(__name__)


router = APIRouter()


@router.post("/agents/{agent}/{name}/chat")
async def chat_route(agent: str, name: str, request: ChatRequest) -> EventSourceResponse:
    """Run a chat turn and stream the UI message chunks via SSE."""
    session = get_session_or_404(agent, name)
    new_message = user_message(request.text) if request.text else None

    async def stream_response() -> AsyncGenerator[dict, None]:
        try:
            async for chunk in session.on_chat_message(
                messages=request.messages, new_message=new_message
            ):
                yield {"data": json.dumps(chunk)}
        except Exception as e:
            # Can't raise HTTPException once streaming, send an error chunk
            logger.exception("Error during chat streaming for %s/%s", agent, name)
            yield {"data": json.dumps({"type": "error", "errorText": str(e)})}
        yield {"data": "[DONE]"}

    return EventSourceResponse(
        stream_response(), headers={STREAM_PROTOCOL_HEADER: "v1"}
    )
