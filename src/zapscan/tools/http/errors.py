"""Uniform transport failure raised by the ZAP API client."""

from __future__ import annotations

from typing import Any

NO_RESPONSE_MESSAGE = "No response from ZAP (request made, no reply)"

# Engine-side error codes that mean "this job/resource is gone".
NOT_FOUND_CODES = frozenset({"does_not_exist", "url_not_found"})


class TransportError(Exception):
    """A failed call to the engine, reduced to ``{status, message}``."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str = "",
        code: str = "",
        no_response: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.code = code
        self.no_response = no_response

    @property
    def not_found(self) -> bool:
        """True when the engine reports the resource as missing."""
        return self.status == 404 or self.code in NOT_FOUND_CODES

    @property
    def diagnostic(self) -> str:
        """Most specific human-readable description of the failure."""
        if self.status is not None:
            details = f" - {self.body}" if self.body else ""
            return f"HTTP {self.status}{details}"
        return self.message

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status, "message": self.diagnostic}

    def __str__(self) -> str:
        return self.diagnostic
