"""
Route registration for the chat agent API.
"""

from fastapi import FastAPI

from . import agents, events, health


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(health.router)
    app.include_router(events.router)
    agents.register_routes(app)
