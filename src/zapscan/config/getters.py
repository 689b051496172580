"""Configuration getter functions."""

import os
from pathlib import Path
from typing import Any

from zapscan.tools.http import DEFAULT_PATH_PREFIX, DEFAULT_PROXY_URL

from .env_loader import global_config_dir, load_global_config, load_project_config


def get_config(key: str, project_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Project .env file
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        project_dir: Optional project directory
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    # 1. Check environment variable
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    # 2. Check project .env file
    project_config = load_project_config(project_dir)
    if key in project_config:
        return project_config[key]

    # 3. Check global config
    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    # 4. Return default
    return default


def get_proxy_url(project_dir: Path | None = None) -> str:
    """Get the relay base URL (default: http://localhost:3001)."""
    return str(get_config("ZAPSCAN_PROXY_URL", project_dir, default=DEFAULT_PROXY_URL))


def get_path_prefix(project_dir: Path | None = None) -> str:
    """Get the path segment the relay expects in front of engine paths."""
    return str(get_config("ZAPSCAN_PATH_PREFIX", project_dir, default=DEFAULT_PATH_PREFIX))


def get_api_key(project_dir: Path | None = None) -> str | None:
    """Get the engine API key; only needed when talking to ZAP without the relay."""
    value = get_config("ZAPSCAN_API_KEY", project_dir)
    return str(value) if value else None


def get_history_path(project_dir: Path | None = None) -> Path:
    """Get the scan history file location."""
    value = get_config("ZAPSCAN_HISTORY_PATH", project_dir)
    if value:
        return Path(str(value)).expanduser()
    return global_config_dir() / "history.json"


def get_log_level(project_dir: Path | None = None) -> str:
    return str(get_config("ZAPSCAN_LOG_LEVEL", project_dir, default="WARNING")).upper()
