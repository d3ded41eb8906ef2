"""
Remote MCP tool provider connections.

A session registers remote tool servers by name, connects to them once, and
hands their toolsets to the model on every turn. Registration and connection
are idempotent per name and serialized by a lock, so concurrent turns of the
same session never register a server twice.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Literal

from pydantic_ai.mcp import MCPToolset

from core import NotFoundError, gen_id
from core.logging_config import timed

logger = logging.getLogger(__name__)

ConnectionState = Literal["registered", "ready", "failed"]


@dataclass
class MCPConnection:
    """A registered remote tool server."""

    id: str
    name: str
    url: str
    callback_url: str | None
    server: Any
    state: ConnectionState = "registered"
    error: str | None = None
    connected_at: float | None = None


def _streamable_http_toolset(url: str) -> MCPToolset:
    return MCPToolset(url)


class MCPClientManager:
    """
    Registry of the remote tool servers a session talks to.

    Args:
        server_factory: Builds the toolset for a server URL. Defaults to a
            pydantic-ai MCP toolset speaking streamable HTTP.
    """

    def __init__(self, server_factory: Callable[[str], Any] | None = None):
        self._server_factory = server_factory or _streamable_http_toolset
        self._connections: dict[str, MCPConnection] = {}
        self._lock = asyncio.Lock()

    def _by_name(self, name: str) -> MCPConnection | None:
        for connection in self._connections.values():
            if connection.name == name:
                return connection
        return None

    async def discover_if_connected(self, name: str) -> bool:
        """Check whether the named server is registered and connected."""
        connection = self._by_name(name)
        return connection is not None and connection.state == "ready"

    async def register_server(self, name: str, url: str, callback_url: str | None = None) -> str:
        """
        Register a server under ``name``.

        Registering a name twice returns the existing registration.

        Returns:
            The server ID
        """
        existing = self._by_name(name)
        if existing is not None:
            return existing.id

        connection = MCPConnection(
            id=gen_id("mcp_"),
            name=name,
            url=url,
            callback_url=callback_url,
            server=self._server_factory(url),
        )
        self._connections[connection.id] = connection
        logger.info("Registered MCP server %s at %s (%s)", name, url, connection.id)
        return connection.id

    @timed("MCP connect")
    async def connect_to_server(self, server_id: str) -> None:
        """
        Open the connection to a registered server.

        Raises:
            NotFoundError: If the server ID is unknown
        """
        connection = self._connections.get(server_id)
        if connection is None:
            raise NotFoundError("MCP server", server_id)
        if connection.state == "ready":
            return

        try:
            await connection.server.__aenter__()
        except Exception as e:
            connection.state = "failed"
            connection.error = str(e)
            logger.error("Failed to connect to MCP server %s: %s", connection.name, e)
            raise
        connection.state = "ready"
        connection.error = None
        connection.connected_at = time.time()
        logger.info("Connected to MCP server %s", connection.name)

    async def ensure_connected(self, name: str, url: str, callback_url: str | None = None) -> None:
        """Register and connect the named server unless it is already connected."""
        async with self._lock:
            if await self.discover_if_connected(name):
                return
            server_id = await self.register_server(name, url, callback_url)
            await self.connect_to_server(server_id)

    def get_toolsets(self) -> list[Any]:
        """Toolsets of every connected server, ready to hand to the model."""
        return [c.server for c in self._connections.values() if c.state == "ready"]

    async def list_tools(self) -> dict[str, dict[str, Any]]:
        """
        List the tools currently offered by connected servers.

        Returns:
            Mapping of tool name to its name, description, input schema and server
        """
        tools: dict[str, dict[str, Any]] = {}
        for connection in self._connections.values():
            if connection.state != "ready":
                continue
            for tool in await connection.server.list_tools():
                tools[tool.name] = {
                    "name": tool.name,
                    "description": tool.description or "",
                    "inputSchema": tool.inputSchema,
                    "server": connection.name,
                }
        return tools

    def list_servers(self) -> list[dict[str, Any]]:
        """Describe every registered server and its connection state."""
        return [
            {
                "id": c.id,
                "name": c.name,
                "url": c.url,
                "callbackUrl": c.callback_url,
                "state": c.state,
                "error": c.error,
                "connectedAt": c.connected_at,
            }
            for c in self._connections.values()
        ]

    async def close(self) -> None:
        """Close every open connection."""
        async with self._lock:
            for connection in self._connections.values():
                if connection.state != "ready":
                    continue
                try:
                    await connection.server.__aexit__(None, None, None)
                except Exception:
                    logger.exception("Error closing MCP server %s", connection.name)
                connection.state = "registered"
            logger.info("Closed MCP connections")
