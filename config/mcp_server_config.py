"""MCPServerConfig model."""

from pydantic import BaseModel, Field


class MCPServerConfig(BaseModel):
    """Remote MCP (Model Context Protocol) tool server reachable over HTTP."""

    url: str = Field(description="Streamable HTTP endpoint of the server")
    callback_url: str | None = Field(
        default=None, description="Callback endpoint registered with the server"
    )
