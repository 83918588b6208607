from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

Row = dict[str, Any]


@dataclass(frozen=True)
class ColumnDescriptor:
    label: str
    field_name: str
    type: str
    sortable: bool = True
    type_attributes: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "label": self.label,
            "fieldName": self.field_name,
            "type": self.type,
            "sortable": self.sortable,
        }
        if self.type_attributes:
            payload["typeAttributes"] = dict(self.type_attributes)
        return payload


@dataclass(frozen=True)
class TableProjection:
    """Columns and rows ready for a generic table renderer."""

    title: str
    columns: tuple[ColumnDescriptor, ...]
    rows: tuple[Row, ...]

    @property
    def count(self) -> int:
        return len(self.rows)
