"""
Chat agent HTTP server.

Exposes agent sessions as streaming chat endpoints for AI SDK style clients,
along with conversation, approval and event routes.
"""

from .app import app
from .routes import register_routes
from .state import get_sessions, set_sessions

# Register all routes with the app
register_routes(app)

__all__ = ["app", "get_sessions", "set_sessions"]
