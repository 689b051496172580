"""Typed scan settings assembled from the configuration sources."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from zapscan.tools.http import DEFAULT_PATH_PREFIX, DEFAULT_PROXY_URL, DEFAULT_TIMEOUT

from .getters import get_api_key, get_config, get_path_prefix, get_proxy_url


def _float_value(value: Any, default: float) -> float:
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _int_value(value: Any, default: int) -> int:
    try:
        parsed = int(value) if value is not None else default
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 0 else default


@dataclass
class ScanSettings:
    """Timeouts, attempt ceilings and engine parameters for a scan run.

    Phase time limits are attempt counts, so ``max_attempts * poll_interval``
    approximates the wall-clock bound of each phase.
    """

    proxy_url: str = DEFAULT_PROXY_URL
    path_prefix: str = DEFAULT_PATH_PREFIX
    api_key: str | None = None
    request_timeout: float = DEFAULT_TIMEOUT
    status_timeout: float = 5.0
    probe_timeout: float = 10.0
    results_timeout: float = 15.0
    access_timeout: float = 15.0
    stop_timeout: float = 3.0
    poll_interval: float = 2.0
    spider_max_attempts: int = 30
    quick_max_attempts: int = 60
    full_max_attempts: int = 300
    start_attempts: int = 3
    start_backoff: float = 2.0
    results_page_size: int = 1000
    scan_policy: str = "Default Policy"
    threads_per_host: int = 2

    @classmethod
    def from_config(cls, project_dir: Path | None = None) -> "ScanSettings":
        """Create settings from env, project .env and global config (evaluated at call time)."""

        def number(key: str, default: float) -> float:
            return _float_value(get_config(key, project_dir), default)

        def count(key: str, default: int) -> int:
            return _int_value(get_config(key, project_dir), default)

        return cls(
            proxy_url=get_proxy_url(project_dir),
            path_prefix=get_path_prefix(project_dir),
            api_key=get_api_key(project_dir),
            request_timeout=number("ZAPSCAN_TIMEOUT", cls.request_timeout),
            status_timeout=number("ZAPSCAN_STATUS_TIMEOUT", cls.status_timeout),
            probe_timeout=number("ZAPSCAN_PROBE_TIMEOUT", cls.probe_timeout),
            poll_interval=number("ZAPSCAN_POLL_INTERVAL", cls.poll_interval),
            spider_max_attempts=count("ZAPSCAN_SPIDER_MAX_ATTEMPTS", cls.spider_max_attempts),
            quick_max_attempts=count("ZAPSCAN_QUICK_MAX_ATTEMPTS", cls.quick_max_attempts),
            full_max_attempts=count("ZAPSCAN_FULL_MAX_ATTEMPTS", cls.full_max_attempts),
        )


def load_scan_settings(project_dir: Path | None = None) -> ScanSettings:
    """Load scan settings with sensible defaults."""
    return ScanSettings.from_config(project_dir)
