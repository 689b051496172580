"""Async JSON client for the ZAP API, reached through the relay."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .errors import NO_RESPONSE_MESSAGE, TransportError

logger = logging.getLogger(__name__)

DEFAULT_PROXY_URL = "http://localhost:3001"
DEFAULT_PATH_PREFIX = "/zap"
DEFAULT_TIMEOUT = 30.0
MAX_BODY_CHARS = 500


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ZapClient:
    """Thin wrapper that sends every engine call as a GET with a fixed timeout."""

    def __init__(
        self,
        base_url: str = DEFAULT_PROXY_URL,
        path_prefix: str = DEFAULT_PATH_PREFIX,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
    ):
        self.base_url = base_url.rstrip("/")
        self.path_prefix = "/" + path_prefix.strip("/") if path_prefix.strip("/") else ""
        self.api_key = api_key
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            verify=self.verify_ssl,
            headers={"Accept": "application/json"},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None

    @property
    def endpoint(self) -> str:
        """Human-readable location of the engine, used in error messages."""
        return f"{self.base_url}{self.path_prefix}"

    def build_path(self, path: str) -> str:
        """Prefix an engine path with the relay segment unless already present."""
        if not path.startswith("/"):
            path = f"/{path}"
        if self.path_prefix and not path.startswith(f"{self.path_prefix}/"):
            path = f"{self.path_prefix}{path}"
        return path

    async def get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Call an engine endpoint and return its decoded JSON object."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        query = {key: _stringify(value) for key, value in (params or {}).items()}
        if self.api_key:
            query["apikey"] = self.api_key
        url = self.build_path(path)

        start = time.time()
        try:
            response = await self.client.get(
                url,
                params=query,
                timeout=self.timeout if timeout is None else timeout,
            )
        except httpx.TransportError as exc:
            logger.debug("No response for %s: %r", url, exc)
            raise TransportError(f"{NO_RESPONSE_MESSAGE}: {exc}", no_response=True) from exc
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        elapsed = time.time() - start
        logger.debug("GET %s -> %s (%.2fs)", url, response.status_code, elapsed)

        if response.is_error:
            raise self._status_error(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON from ZAP at {url}: {exc}") from exc
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected JSON payload from ZAP at {url}")
        return data

    def _status_error(self, response: httpx.Response) -> TransportError:
        body = response.text[:MAX_BODY_CHARS]
        code = ""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            code = str(payload.get("code") or "")
        reason = response.reason_phrase or ""
        message = f"HTTP {response.status_code} {reason}".strip()
        return TransportError(message, status=response.status_code, body=body, code=code)
