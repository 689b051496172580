"""Partial schemas for engine responses.

The engine omits fields freely and encodes most values as strings, so every
schema reads its payload defensively and falls back to empty values instead of
assuming a field is present.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    text = _text(value)
    return text or None


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> list[str]:
    """Accept either a JSON list or the engine's bracketed string form."""
    if isinstance(value, list):
        return [_text(item) for item in value if _text(item)]
    text = _text(value)
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    return [part.strip() for part in text.split(",") if part.strip()]


@dataclass
class VersionView:
    version: str = ""

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "VersionView":
        return cls(version=_text(data.get("version")))


@dataclass
class ScanStarted:
    """Response of a spider/active-scan start action."""

    scan_id: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "ScanStarted":
        return cls(scan_id=_optional_text(data.get("scan")))


@dataclass
class StatusView:
    status: int = 0

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "StatusView":
        return cls(status=max(0, min(100, _as_int(data.get("status")))))


@dataclass
class RawAlert:
    id: str = ""
    name: str = ""
    risk: str = ""
    description: str = ""
    confidence: str | None = None
    url: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "RawAlert":
        return cls(
            id=_text(data.get("id") or data.get("alertRef") or data.get("pluginId")),
            name=_text(data.get("name") or data.get("alert")),
            risk=_text(data.get("risk")),
            description=_text(data.get("description")),
            confidence=_optional_text(data.get("confidence")),
            url=_optional_text(data.get("url")),
        )


@dataclass
class AlertsView:
    alerts: list[RawAlert] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "AlertsView":
        raw = data.get("alerts")
        if not isinstance(raw, list):
            return cls()
        return cls(alerts=[RawAlert.from_payload(item) for item in raw if isinstance(item, dict)])


@dataclass
class ContextList:
    names: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "ContextList":
        return cls(names=_as_list(data.get("contextList")))


@dataclass
class ContextView:
    id: str = ""
    name: str = ""
    include_regexes: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "ContextView":
        context = data.get("context")
        if not isinstance(context, dict):
            return cls()
        return cls(
            id=_text(context.get("id")),
            name=_text(context.get("name")),
            include_regexes=_as_list(context.get("includeRegexs")),
        )


@dataclass
class NewContext:
    context_id: str = ""

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "NewContext":
        return cls(context_id=_text(data.get("contextId")))
