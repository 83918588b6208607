"""Record-fetch collaborators.

A record source resolves an opaque record id to the raw JSON payload stored in
one field of that record. Failures surface as ``UpstreamFetchError`` carrying
the collaborator's message when it provides one.
"""
from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

from tableprojector.domain.errors import UpstreamFetchError, envelope_message
from tableprojector.sources.transports import (
    FsFileTransport,
    HttpStatusError,
    UrlTransport,
    read_all_text,
)

logger = logging.getLogger(__name__)

DEFAULT_FIELD = "Payee_Association_JSON__c"


class RecordSource(ABC):
    @abstractmethod
    def fetch(self, record_id: str) -> Optional[str]:
        """Return the JSON payload for ``record_id`` (``None`` when the field is empty)."""

    async def fetch_async(self, record_id: str) -> Optional[str]:
        return await asyncio.to_thread(self.fetch, record_id)


def field_value(record: Any, field: str) -> Optional[str]:
    """Pull ``field`` from a record envelope.

    Accepts the platform shape ``{"fields": {field: {"value": ...}}}`` as well
    as a flat ``{field: ...}`` object. Already-decoded values are re-encoded
    so the projector always receives text.
    """
    if not isinstance(record, Mapping):
        raise UpstreamFetchError(
            f"record payload must be an object, got {type(record).__name__}"
        )
    fields = record.get("fields")
    if isinstance(fields, Mapping) and field in fields:
        value = fields[field]
        if isinstance(value, Mapping):
            value = value.get("value")
    else:
        value = record.get(field)
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def _decode_record(text: str, origin: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise UpstreamFetchError(f"invalid record data from {origin}: {exc}") from exc


class StaticRecordSource(RecordSource):
    """Serves one payload for every record id (stdin or a payload file)."""

    def __init__(self, payload: Optional[str]) -> None:
        self.payload = payload

    def fetch(self, record_id: str) -> Optional[str]:
        return self.payload


class FsRecordSource(RecordSource):
    def __init__(self, directory: str | Path, *, field: str = DEFAULT_FIELD, encoding: str = "utf-8") -> None:
        self.directory = Path(directory)
        self.field = field
        self.encoding = encoding

    def path_for(self, record_id: str) -> Path:
        return self.directory / f"{record_id}.json"

    def fetch(self, record_id: str) -> Optional[str]:
        path = self.path_for(record_id)
        logger.debug("Reading record %s from %s", record_id, path)
        try:
            text = read_all_text(FsFileTransport(str(path)).stream(), self.encoding)
        except FileNotFoundError as exc:
            raise UpstreamFetchError(f"record {record_id} not found in {self.directory}") from exc
        except OSError as exc:
            raise UpstreamFetchError(f"failed to read {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise UpstreamFetchError(f"record {record_id} is not valid {self.encoding} text: {exc}") from exc
        record = _decode_record(text, str(path))
        message = envelope_message(record.get("error")) if isinstance(record, Mapping) else None
        if message:
            raise UpstreamFetchError(message)
        return field_value(record, self.field)


class UrlRecordSource(RecordSource):
    def __init__(
        self,
        url_template: str,
        *,
        field: str = DEFAULT_FIELD,
        headers: Optional[Dict[str, str]] = None,
        encoding: str = "utf-8",
    ) -> None:
        if "{record_id}" not in url_template:
            raise ValueError("url template must contain '{record_id}'")
        self.url_template = url_template
        self.field = field
        self.headers = dict(headers or {})
        self.encoding = encoding

    def url_for(self, record_id: str) -> str:
        return self.url_template.format(record_id=quote(str(record_id), safe=""))

    def fetch(self, record_id: str) -> Optional[str]:
        url = self.url_for(record_id)
        logger.debug("Fetching record %s from %s", record_id, url)
        transport = UrlTransport(url, headers=self.headers)
        try:
            text = read_all_text(transport.stream(), self.encoding)
        except HttpStatusError as exc:
            message = None
            if exc.body:
                try:
                    message = envelope_message(json.loads(exc.body.decode(self.encoding, "replace")))
                except json.JSONDecodeError:
                    message = None
            raise UpstreamFetchError(message or str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise UpstreamFetchError(f"response from {url} is not valid {self.encoding} text: {exc}") from exc
        return field_value(_decode_record(text, url), self.field)


def build_record_source(*, transport: str, **kwargs: Any) -> RecordSource:
    """Factory entrypoint for record sources.

    Args (by transport):
      fs: path (directory of ``<record_id>.json`` files), field, encoding
      url: url (template containing ``{record_id}``), field, headers, encoding
    """
    t = (transport or "").lower()
    field = kwargs.get("field") or DEFAULT_FIELD
    encoding = kwargs.get("encoding", "utf-8")
    if t == "fs":
        path = kwargs.get("path")
        if not path:
            raise ValueError("fs transport requires 'path'")
        return FsRecordSource(path, field=field, encoding=encoding)
    if t == "url":
        url = kwargs.get("url")
        if not url:
            raise ValueError("url transport requires 'url'")
        return UrlRecordSource(url, field=field, headers=kwargs.get("headers"), encoding=encoding)
    raise ValueError(f"unsupported transport: {transport}")
