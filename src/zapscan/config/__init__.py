"""
Configuration management for zapscan.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Project .env file (.zapscan/.env)
3. Global config file (~/.zapscan/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import (
    global_config_dir,
    load_env_file,
    load_global_config,
    load_project_config,
)
from .getters import (
    get_api_key,
    get_config,
    get_history_path,
    get_log_level,
    get_path_prefix,
    get_proxy_url,
)
from .settings import ScanSettings, load_scan_settings

__all__ = [
    # env_loader
    "global_config_dir",
    "load_env_file",
    "load_global_config",
    "load_project_config",
    # getters
    "get_api_key",
    "get_config",
    "get_history_path",
    "get_log_level",
    "get_path_prefix",
    "get_proxy_url",
    # settings
    "ScanSettings",
    "load_scan_settings",
]
