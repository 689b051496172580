"""Logging helpers for zapscan."""

import logging

from zapscan.config import get_log_level


def setup_logging(level: str | None = None, verbose: bool = False) -> None:
    """Configure standard logging for CLI use."""
    effective_level = "DEBUG" if verbose else (level or get_log_level()).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    # Request lines from httpx are noise unless debugging.
    if effective_level != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
