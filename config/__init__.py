"""
Configuration module for the chat agent server.

Exports the configuration models, defaults and loader functions.
"""

from .agent_config import AgentConfig
from .defaults import (
    ASSISTANT_SYSTEM_PROMPT,
    DEFAULT_MAX_STEPS,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    FLIGHT_SYSTEM_PROMPT,
    FLIGHTS_SERVER_NAME,
)
from .loader import get_config, load_config, load_config_file, merge_configs, strip_jsonc_comments
from .main_config import Config
from .mcp_server_config import MCPServerConfig

__all__ = [
    # Constants
    "DEFAULT_MODEL",
    "DEFAULT_PROVIDER",
    "DEFAULT_MAX_STEPS",
    "FLIGHTS_SERVER_NAME",
    "ASSISTANT_SYSTEM_PROMPT",
    "FLIGHT_SYSTEM_PROMPT",
    # Config models
    "Config",
    "AgentConfig",
    "MCPServerConfig",
    # Loader functions
    "load_config",
    "get_config",
    "load_config_file",
    "merge_configs",
    "strip_jsonc_comments",
]
