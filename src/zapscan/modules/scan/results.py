"""Fetch engine alerts and map them to findings."""

from __future__ import annotations

import logging

from zapscan.tools.http import TransportError, ZapClient

from .errors import ResultFetchError
from .models import SEVERITIES, Finding, ScanTarget
from .schemas import AlertsView, RawAlert

logger = logging.getLogger(__name__)

ALERTS_PATH = "/JSON/core/view/alerts/"
# Engine risk ids: 1 = Low, 2 = Medium, 3 = High.
ALL_RISK_IDS = "1,2,3"


def map_alert(alert: RawAlert) -> Finding | None:
    """Convert one raw alert; returns None for risks outside high/medium/low."""
    severity = alert.risk.lower()
    if severity not in SEVERITIES:
        logger.debug("Dropping alert %r with risk %r", alert.name, alert.risk)
        return None
    return Finding(
        id=alert.id,
        title=alert.name,
        severity=severity,
        description=alert.description,
        confidence=alert.confidence,
        url=alert.url,
    )


def map_alerts(alerts: list[RawAlert]) -> list[Finding]:
    findings = []
    for alert in alerts:
        finding = map_alert(alert)
        if finding is not None:
            findings.append(finding)
    return findings


class ResultFetcher:
    """Retrieve every finding recorded for a target's base URL."""

    def __init__(self, client: ZapClient, page_size: int = 1000, timeout: float = 15.0):
        self._client = client
        self._page_size = page_size
        self._timeout = timeout

    async def fetch(self, target: ScanTarget) -> list[Finding]:
        """Return mapped findings; an absent result set is an empty list, not an error."""
        params = {
            "baseurl": target.url,
            "start": 0,
            "count": self._page_size,
            "riskId": ALL_RISK_IDS,
        }
        try:
            data = await self._client.get_json(ALERTS_PATH, params=params, timeout=self._timeout)
        except TransportError as exc:
            if exc.not_found:
                logger.warning("Alerts endpoint reported not found; no alerts for %s", target.url)
                return []
            raise ResultFetchError(exc.diagnostic, status=exc.status) from exc

        view = AlertsView.from_payload(data)
        if not view.alerts:
            logger.info("No alerts found for %s", target.url)
            return []
        findings = map_alerts(view.alerts)
        logger.info("Found %d security alerts for %s", len(findings), target.url)
        return findings
