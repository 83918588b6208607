from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tableprojector.domain.errors import (
    WAITING_MESSAGE,
    ErrorKind,
    ProjectionError,
    UpstreamFetchError,
)
from tableprojector.domain.table import ColumnDescriptor, Row
from tableprojector.projection.decode import Payload
from tableprojector.projection.projector import TableProjector
from tableprojector.sources.records import RecordSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class TableState:
    """Everything a renderer needs to draw the table at one point in time."""

    title: str
    columns: tuple[ColumnDescriptor, ...] = ()
    rows: tuple[Row, ...] = ()
    error: Optional[TableError] = None
    is_loading: bool = False

    @property
    def should_show_error(self) -> bool:
        return self.error is not None and self.error.kind is not ErrorKind.WAITING

    @property
    def is_waiting(self) -> bool:
        return self.error is not None and self.error.kind is ErrorKind.WAITING


class TableController:
    """Drives a TableState from record ids and payloads.

    Every transition replaces the state wholesale; nothing from a previous
    payload survives a later call.
    """

    def __init__(self, projector: TableProjector, source: Optional[RecordSource] = None) -> None:
        self.projector = projector
        self.source = source
        self.state = self._waiting_state(self.projector.mapping.title)

    @staticmethod
    def _waiting_state(title: str) -> TableState:
        return TableState(
            title=title,
            error=TableError(ErrorKind.WAITING, WAITING_MESSAGE),
            is_loading=True,
        )

    def waiting(self) -> TableState:
        self.state = self._waiting_state(self.state.title)
        return self.state

    def receive(self, payload: Optional[Payload]) -> TableState:
        if not payload:
            self.state = TableState(title=self.projector.empty_title())
            return self.state
        try:
            projection = self.projector.project(payload)
        except ProjectionError as exc:
            logger.warning("Invalid JSON: %s", exc.message)
            self.state = TableState(
                title=self.projector.empty_title(),
                error=TableError(exc.kind, exc.message),
            )
            return self.state
        self.state = TableState(
            title=projection.title,
            columns=projection.columns,
            rows=projection.rows,
        )
        return self.state

    def fail(self, exc: Optional[BaseException] = None) -> TableState:
        error = exc if isinstance(exc, UpstreamFetchError) else UpstreamFetchError(
            str(exc) if exc is not None and str(exc) else None
        )
        logger.warning("Record fetch failed: %s", error.message)
        self.state = TableState(
            title=self.projector.empty_title(),
            error=TableError(ErrorKind.UPSTREAM_FETCH, error.message),
        )
        return self.state

    def _require_source(self) -> RecordSource:
        if self.source is None:
            raise RuntimeError("TableController has no record source configured")
        return self.source

    def load(self, record_id: Optional[str]) -> TableState:
        if not record_id:
            return self.waiting()
        source = self._require_source()
        try:
            payload = source.fetch(record_id)
        except UpstreamFetchError as exc:
            return self.fail(exc)
        return self.receive(payload)

    async def refresh(self, record_id: Optional[str]) -> TableState:
        if not record_id:
            return self.waiting()
        source = self._require_source()
        try:
            payload = await source.fetch_async(record_id)
        except UpstreamFetchError as exc:
            return self.fail(exc)
        return self.receive(payload)
