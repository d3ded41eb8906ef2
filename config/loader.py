"""Configuration loading utilities."""

import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from .main_config import Config

logger = logging.getLogger(__name__)

CONFIG_DIRNAME = ".chat-agent"
CONFIG_BASENAME = "chat-agent"

# Environment overrides
MODEL_ENV = "CHAT_AGENT_MODEL"
MAX_STEPS_ENV = "CHAT_AGENT_MAX_STEPS"

# A string literal (kept) or a comment (removed)
_JSONC_TOKEN = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)


def strip_jsonc_comments(content: str) -> str:
    """
    Strip comments from JSONC content to convert to valid JSON.

    Handles ``// line`` and ``/* block */`` comments. Comment markers inside
    string literals (such as server URLs) are kept.
    """
    return _JSONC_TOKEN.sub(lambda m: m.group(1) or "", content)


def load_config_file(path: Path) -> dict[str, Any] | None:
    """
    Load a config file from the given path.

    Supports both .json and .jsonc files.

    Returns:
        Parsed config dictionary or None if the file is missing or unreadable
    """
    if not path.exists():
        return None

    try:
        content = path.read_text()
        if path.suffix == ".jsonc":
            content = strip_jsonc_comments(content)
        return json.loads(content)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load config from %s: %s", path, e)
        return None


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two configuration dictionaries, ``override`` winning."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if model := os.environ.get(MODEL_ENV):
        overrides["model"] = model
    if max_steps := os.environ.get(MAX_STEPS_ENV):
        overrides["max_steps"] = int(max_steps)
    return overrides


def load_config(project_root: Path | None = None) -> Config:
    """
    Load configuration from multiple sources with precedence.

    Sources, lowest precedence first:
    1. Global: ~/.chat-agent/chat-agent.jsonc
    2. Project: chat-agent.jsonc, chat-agent.json, .chat-agent/chat-agent.jsonc
       (first one found)
    3. Environment: CHAT_AGENT_MODEL, CHAT_AGENT_MAX_STEPS

    Args:
        project_root: Project root directory (defaults to current working directory)

    Returns:
        Loaded and validated Config model
    """
    if project_root is None:
        project_root = Path.cwd()

    global_config_path = Path.home() / CONFIG_DIRNAME / f"{CONFIG_BASENAME}.jsonc"
    config_data = load_config_file(global_config_path) or {}

    project_config_paths = [
        project_root / f"{CONFIG_BASENAME}.jsonc",
        project_root / f"{CONFIG_BASENAME}.json",
        project_root / CONFIG_DIRNAME / f"{CONFIG_BASENAME}.jsonc",
    ]

    for path in project_config_paths:
        project_config = load_config_file(path)
        if project_config:
            logger.info("Loaded config from %s", path)
            config_data = merge_configs(config_data, project_config)
            break

    config_data = merge_configs(config_data, _env_overrides())
    return Config(**config_data)


@lru_cache(maxsize=1)
def get_config(project_root: Path | None = None) -> Config:
    """
    Get cached configuration.

    To reload the config, clear the cache with get_config.cache_clear().
    """
    return load_config(project_root or Path.cwd())
