"""Canonicalize user input into a scan target."""

import logging
import re
from urllib.parse import urlsplit, urlunsplit

from .errors import InvalidUrlError
from .models import ScanTarget

logger = logging.getLogger(__name__)

DEFAULT_SCHEME = "https"
ALLOWED_SCHEMES = ("http", "https")
SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def normalize_target(raw: str) -> ScanTarget:
    """Build a :class:`ScanTarget` from a user-supplied URL string.

    A missing scheme defaults to https. The fragment is always dropped; the
    query string is dropped from the canonical ``url`` and kept in ``display``.
    """
    text = (raw or "").strip()
    if not text:
        raise InvalidUrlError("URL is empty")

    if not SCHEME_RE.match(text):
        text = f"{DEFAULT_SCHEME}://{text}"

    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as exc:
        raise InvalidUrlError(f"{raw!r} could not be parsed ({exc})") from exc

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidUrlError(f"{raw!r} uses unsupported scheme {parts.scheme!r}")
    if not parts.hostname or any(ch.isspace() for ch in parts.netloc):
        raise InvalidUrlError(f"{raw!r} has no valid host")

    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None else f"{host}:{port}"
    if parts.username or parts.password:
        userinfo = parts.username or ""
        if parts.password:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    path = parts.path or "/"

    url = urlunsplit((scheme, netloc, path, "", ""))
    display = urlunsplit((scheme, netloc, path, parts.query, ""))
    logger.debug("Normalized %r -> %s", raw, url)
    return ScanTarget(url=url, display=display)
