"""
Error taxonomy for iorgate.

Every failure raised by the parser, resolver, stores or bridge derives
from GatewayError. Only the HTTP binding layer translates these into
responses; everything below it lets them propagate unchanged.
"""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base class for all gateway failures."""

    kind: str = "GatewayError"
    status_code: int = 500

    def __init__(self, message: str = "", **details: Any):
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class MalformedReference(GatewayError):
    """Address string violates the reference grammar."""

    kind = "MalformedReference"
    status_code = 400


class MalformedPayload(GatewayError):
    """Create/update body is missing required fields or fails schema validation."""

    kind = "MalformedPayload"
    status_code = 422


class NotFound(GatewayError):
    """Address does not resolve to any component or resource."""

    kind = "NotFound"
    status_code = 404


class UnsupportedOperation(GatewayError):
    """Verb/path combination not recognised by the binding layer."""

    kind = "UnsupportedOperation"
    status_code = 405


class Conflict(GatewayError):
    """Identifier or alias is already taken, or is being created concurrently."""

    kind = "Conflict"
    status_code = 409


__all__ = [
    "Conflict",
    "GatewayError",
    "MalformedPayload",
    "MalformedReference",
    "NotFound",
    "UnsupportedOperation",
]
