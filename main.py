"""
Chat agent server entry point.
"""
import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import get_config
from core.logging_config import setup_logging
from server import app, get_sessions

# Initialize logging before anything else
setup_logging()
logger = logging.getLogger(__name__)

# Constants
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Shut sessions down (schedules, MCP connections) with the server."""
    config = get_config()
    logger.info("Starting chat agent server")
    logger.info("Model: %s", config.model)
    logger.info("Step budget per turn: %d", config.max_steps)
    logger.info("MCP servers: %s", ", ".join(config.mcp) or "none")

    yield

    logger.info("Shutting down sessions...")
    await get_sessions().shutdown()
    logger.info("Sessions stopped")


app.router.lifespan_context = lifespan


def main() -> None:
    """Start the server."""
    host = os.environ.get("HOST", DEFAULT_HOST)
    port = int(os.environ.get("PORT", str(DEFAULT_PORT)))

    logger.info("Server listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
