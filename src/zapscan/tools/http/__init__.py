"""HTTP helpers for zapscan."""

from .client import DEFAULT_PATH_PREFIX, DEFAULT_PROXY_URL, DEFAULT_TIMEOUT, ZapClient
from .errors import NO_RESPONSE_MESSAGE, TransportError

__all__ = [
    "DEFAULT_PATH_PREFIX",
    "DEFAULT_PROXY_URL",
    "DEFAULT_TIMEOUT",
    "NO_RESPONSE_MESSAGE",
    "TransportError",
    "ZapClient",
]
