"""Best-effort scan context registration for full scans."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from zapscan.tools.http import TransportError, ZapClient

from .errors import ScanCancelledError
from .models import CancelCheck, ScanTarget
from .schemas import ContextList, ContextView, NewContext

logger = logging.getLogger(__name__)

CONTEXT_LIST_PATH = "/JSON/context/view/contextList/"
CONTEXT_VIEW_PATH = "/JSON/context/view/context/"
NEW_CONTEXT_PATH = "/JSON/context/action/newContext/"
INCLUDE_PATH = "/JSON/context/action/includeInContext/"


@dataclass(frozen=True, slots=True)
class ContextRegistration:
    name: str
    context_id: str = ""
    created: bool = False


def include_pattern(url: str) -> str:
    """Regex that covers the target URL and everything beneath it."""
    return f"{re.escape(url)}.*"


def _covers(regexes: list[str], url: str) -> bool:
    for pattern in regexes:
        try:
            if re.fullmatch(pattern, url):
                return True
        except re.error:
            logger.debug("Ignoring unparsable context regex %r", pattern)
    return False


class ContextRegistrar:
    """Find a context whose scope covers the target, or create one.

    ``is_cancelled`` is read before every engine call; cancellation is raised,
    not swallowed like the transport failures.
    """

    def __init__(
        self,
        client: ZapClient,
        clock: Callable[[], float] = time.time,
        is_cancelled: CancelCheck | None = None,
    ):
        self._client = client
        self._clock = clock
        self._is_cancelled = is_cancelled

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if self._is_cancelled is not None and self._is_cancelled():
            raise ScanCancelledError()
        return await self._client.get_json(path, params=params)

    async def ensure(self, target: ScanTarget) -> ContextRegistration | None:
        """Return the registration, or None to fall back to unscoped scanning."""
        try:
            existing = await self._find_existing(target)
            if existing:
                logger.info("Target %s already in context %s", target.url, existing.name)
                return existing
            return await self._create(target)
        except TransportError as exc:
            logger.warning("Context registration failed, using default scan parameters: %s", exc)
            return None

    async def _find_existing(self, target: ScanTarget) -> ContextRegistration | None:
        listing = ContextList.from_payload(await self._get(CONTEXT_LIST_PATH))
        for name in listing.names:
            try:
                view = ContextView.from_payload(
                    await self._get(CONTEXT_VIEW_PATH, params={"contextName": name})
                )
            except TransportError as exc:
                logger.debug("Skipping context %s: %s", name, exc)
                continue
            if _covers(view.include_regexes, target.url):
                return ContextRegistration(name=name, context_id=view.id)
        return None

    async def _create(self, target: ScanTarget) -> ContextRegistration:
        name = f"scan-context-{int(self._clock() * 1000)}"
        created = NewContext.from_payload(
            await self._get(NEW_CONTEXT_PATH, params={"contextName": name})
        )
        await self._get(
            INCLUDE_PATH,
            params={"contextName": name, "regex": include_pattern(target.url)},
        )
        logger.info("Created context %s for %s", name, target.url)
        return ContextRegistration(name=name, context_id=created.context_id, created=True)
