from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from tableprojector.config.mapping import ColumnMapping, MappingEntry, default_mapping
from tableprojector.domain.errors import UnexpectedShapeError
from tableprojector.domain.table import ColumnDescriptor, Row, TableProjection
from tableprojector.projection.decode import Payload, decode_records

logger = logging.getLogger(__name__)

LINK_TARGET = "_blank"


def _link_target(value: Any) -> str:
    """Stringify an id the way JSON writes it (``true``, ``1`` rather than ``True``, ``1.0``)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class TableProjector:
    """Projects a JSON array of records into datatable columns and rows.

    Stateless: every call to :meth:`project` builds its output from scratch.
    Non-object elements become rows whose mapped fields are all ``None``
    unless ``strict`` is set, in which case they fail the whole payload.
    """

    def __init__(self, mapping: Optional[ColumnMapping] = None, *, strict: bool = False) -> None:
        self.mapping = mapping if mapping is not None else default_mapping()
        self.strict = strict
        self._columns = tuple(self._column(entry) for entry in self.mapping.visible_entries)

    @property
    def columns(self) -> tuple[ColumnDescriptor, ...]:
        return self._columns

    def title(self, count: int) -> str:
        return f"{self.mapping.title} ({count})"

    def empty_title(self) -> str:
        return self.title(0)

    def project(self, payload: Payload) -> TableProjection:
        records = decode_records(payload)
        if self.strict:
            for index, record in enumerate(records):
                if not isinstance(record, Mapping):
                    raise UnexpectedShapeError(
                        f"JSON structure is invalid: expected an array of objects "
                        f"(element {index} is {type(record).__name__})."
                    )
        logger.debug("Projecting %d record(s) for '%s'", len(records), self.mapping.title)
        rows = tuple(self._row(index, record) for index, record in enumerate(records))
        return TableProjection(
            title=self.title(len(records)),
            columns=self._columns,
            rows=rows,
        )

    def _row(self, index: int, record: Any) -> Row:
        if not isinstance(record, Mapping):
            logger.warning(
                "Record %d is %s, not an object; projecting empty row",
                index + 1,
                type(record).__name__,
            )
            record = {}
        row: Row = {"id": index + 1}
        link = self.mapping.link_entry
        if link is not None:
            target = record.get(self.mapping.link_id_key)
            row[link.url_field_name] = f"/{_link_target(target)}" if target else None
            row[link.label_field_name] = record.get(link.json_key)
        for entry in self.mapping.entries:
            row[entry.json_key] = record.get(entry.json_key)
        return row

    @staticmethod
    def _column(entry: MappingEntry) -> ColumnDescriptor:
        field_name = entry.json_key
        attributes: dict[str, Any] = {}
        if entry.is_link:
            field_name = entry.url_field_name
            attributes = {
                "label": {"fieldName": entry.label_field_name},
                "target": LINK_TARGET,
            }
            if entry.tooltip:
                attributes["tooltip"] = entry.tooltip
        if entry.number_format is not None:
            attributes = {**attributes, **entry.number_format.type_attributes()}
        return ColumnDescriptor(
            label=entry.label,
            field_name=field_name,
            type=entry.kind,
            type_attributes=attributes,
        )


def project(payload: Payload, mapping: Optional[ColumnMapping] = None, *, strict: bool = False) -> TableProjection:
    return TableProjector(mapping, strict=strict).project(payload)
