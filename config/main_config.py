"""Main Config model."""

from pydantic import BaseModel, Field

from .agent_config import AgentConfig
from .defaults import (
    DEFAULT_MAX_STEPS,
    DEFAULT_MODEL,
    FLIGHTS_SERVER_CALLBACK_URL,
    FLIGHTS_SERVER_NAME,
    FLIGHTS_SERVER_URL,
)
from .mcp_server_config import MCPServerConfig


def _default_mcp_servers() -> dict[str, MCPServerConfig]:
    return {
        FLIGHTS_SERVER_NAME: MCPServerConfig(
            url=FLIGHTS_SERVER_URL, callback_url=FLIGHTS_SERVER_CALLBACK_URL
        )
    }


class Config(BaseModel):
    """Main configuration model."""

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Default model, either a bare Anthropic model ID or 'provider:model'",
    )
    max_steps: int = Field(
        default=DEFAULT_MAX_STEPS,
        ge=1,
        description="Maximum number of model requests (tool rounds) per turn",
    )
    agents: dict[str, AgentConfig] = Field(
        default_factory=dict,
        description="Per-agent overrides by agent type name",
    )
    mcp: dict[str, MCPServerConfig] = Field(
        default_factory=_default_mcp_servers,
        description="Remote MCP server configurations by name",
    )

    def agent(self, name: str) -> AgentConfig:
        """Get overrides for an agent type (empty if none configured)."""
        return self.agents.get(name, AgentConfig())
