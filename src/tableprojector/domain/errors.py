from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional

WAITING_MESSAGE = "Waiting for record ID..."
UNEXPECTED_SHAPE_MESSAGE = "JSON structure is invalid: expected an array of objects."
FETCH_FALLBACK_MESSAGE = "An unknown error occurred while fetching record data."


class ErrorKind(str, Enum):
    WAITING = "WAITING"
    MALFORMED_JSON = "MALFORMED_JSON"
    UNEXPECTED_SHAPE = "UNEXPECTED_SHAPE"
    UPSTREAM_FETCH = "UPSTREAM_FETCH"


class ProjectionError(ValueError):
    """Raised when a payload cannot be projected into a table."""

    kind: ErrorKind

    @property
    def message(self) -> str:
        return str(self)


class MalformedJsonError(ProjectionError):
    kind = ErrorKind.MALFORMED_JSON


class UnexpectedShapeError(ProjectionError):
    kind = ErrorKind.UNEXPECTED_SHAPE

    def __init__(self, message: str = UNEXPECTED_SHAPE_MESSAGE) -> None:
        super().__init__(message)


class UpstreamFetchError(RuntimeError):
    kind = ErrorKind.UPSTREAM_FETCH

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or FETCH_FALLBACK_MESSAGE)

    @property
    def message(self) -> str:
        return str(self)

    @classmethod
    def from_envelope(cls, envelope: Any) -> "UpstreamFetchError":
        """Build from a platform error envelope: ``body.message``, then ``message``."""
        return cls(envelope_message(envelope))


def envelope_message(envelope: Any) -> Optional[str]:
    if not isinstance(envelope, Mapping):
        return None
    body = envelope.get("body")
    if isinstance(body, Mapping):
        text = body.get("message")
        if text:
            return str(text)
    text = envelope.get("message")
    if text:
        return str(text)
    return None
