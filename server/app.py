"""
FastAPI application setup and configuration.
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.middleware import RequestLoggingMiddleware


API_TITLE = "Chat Agent API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Streaming chat agents with human-approved tool calls"

# AI SDK clients only parse a response as a UI message stream with this header
STREAM_PROTOCOL_HEADER = "x-vercel-ai-ui-message-stream"


def cors_origins(value: str | None) -> list[str]:
    """Parse ``CORS_ORIGINS``: a comma-separated origin list, any origin if unset."""
    if not value or value.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in value.split(",") if origin.strip()]


app = FastAPI(title=API_TITLE, version=API_VERSION, description=API_DESCRIPTION)

# Browser clients must be able to read the stream protocol header
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(os.environ.get("CORS_ORIGINS")),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[STREAM_PROTOCOL_HEADER],
)

# Request logging middleware (added after CORS so it runs first)
app.add_middleware(RequestLoggingMiddleware)
