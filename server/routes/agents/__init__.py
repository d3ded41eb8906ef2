"""
Conversation route registration.

Every route addresses one conversation as ``/agents/{agent}/{name}``.
"""

from fastapi import FastAPI

from . import abort, chat, decision, messages, tools


def register_routes(app: FastAPI) -> None:
    """Register all conversation routes."""
    app.include_router(chat.router)
    app.include_router(messages.router)
    app.include_router(decision.router)
    app.include_router(abort.router)
    app.include_router(tools.router)
