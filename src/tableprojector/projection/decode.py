"""JSON payload decoding for table projection.

Some upstream fields arrive double-serialized (a JSON string holding the JSON
array), so a decoded ``str`` is decoded once more before the shape check.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Union

from tableprojector.domain.errors import MalformedJsonError, UnexpectedShapeError

logger = logging.getLogger(__name__)

Payload = Union[str, bytes, bytearray]


def _reject_constant(name: str) -> Any:
    raise MalformedJsonError(f"Unexpected token {name}: non-finite numbers are not valid JSON")


def _loads(text: Payload) -> Any:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedJsonError(str(exc)) from exc
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise MalformedJsonError(str(exc)) from exc


def decode_payload(payload: Payload) -> Any:
    """Decode ``payload``, unwrapping one level of string double-encoding."""
    value = _loads(payload)
    if isinstance(value, str):
        logger.debug("Payload was double-encoded; decoding nested JSON string")
        value = _loads(value)
    return value


def decode_records(payload: Payload) -> list[Any]:
    value = decode_payload(payload)
    if not isinstance(value, list):
        raise UnexpectedShapeError()
    return value
