"""Engine reachability check run before any scan phase."""

import logging

from zapscan.tools.http import TransportError, ZapClient

from .errors import EngineUnreachableError, describe_transport_error
from .schemas import VersionView

logger = logging.getLogger(__name__)

VERSION_PATH = "/JSON/core/view/version/"
DEFAULT_PROBE_TIMEOUT = 10.0


async def probe_engine(client: ZapClient, timeout: float = DEFAULT_PROBE_TIMEOUT) -> str:
    """Return the engine version, or raise EngineUnreachableError. No retries."""
    try:
        data = await client.get_json(VERSION_PATH, timeout=timeout)
    except TransportError as exc:
        raise EngineUnreachableError(
            describe_transport_error(exc), status=exc.status, endpoint=client.endpoint
        ) from exc
    version = VersionView.from_payload(data).version
    logger.info("ZAP reachable at %s (version %s)", client.endpoint, version or "unknown")
    return version
