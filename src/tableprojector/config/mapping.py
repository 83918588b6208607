from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tableprojector.config.options import COLUMN_KINDS, is_numeric_kind
from tableprojector.utils.load import load_yaml

ColumnKind = Literal["text", "number", "currency", "url", "hidden"]

DEFAULT_TITLE = "Payee Association"
DEFAULT_LINK_ID_KEY = "caseIssueId"
DEFAULT_LINK_TOOLTIP = "Open Case Issue Record"
RESERVED_FIELDS = ("id",)


class NumberFormat(BaseModel):
    """Display hints for numeric columns, named the way datatables expect them."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    minimum_integer_digits: Optional[int] = Field(
        default=None, alias="minimumIntegerDigits", ge=1
    )
    minimum_fraction_digits: Optional[int] = Field(
        default=None, alias="minimumFractionDigits", ge=0
    )
    maximum_fraction_digits: Optional[int] = Field(
        default=None, alias="maximumFractionDigits", ge=0
    )

    @model_validator(mode="after")
    def _validate(self):
        lo = self.minimum_fraction_digits
        hi = self.maximum_fraction_digits
        if lo is not None and hi is not None and lo > hi:
            raise ValueError("minimumFractionDigits cannot exceed maximumFractionDigits")
        return self

    def type_attributes(self) -> dict[str, int]:
        return self.model_dump(by_alias=True, exclude_none=True)


class MappingEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    json_key: str = Field(..., alias="jsonKey", min_length=1)
    label: str
    kind: ColumnKind = Field(default="text", alias="type", description=" | ".join(COLUMN_KINDS))
    url_field_name: Optional[str] = Field(default=None, alias="urlFieldName")
    label_field_name: Optional[str] = Field(default=None, alias="labelFieldName")
    tooltip: Optional[str] = None
    number_format: Optional[NumberFormat] = Field(default=None, alias="typeAttributes")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        if value is None:
            return "text"
        return str(value).strip().lower()

    @field_validator("url_field_name", "label_field_name", "tooltip", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            text = value.strip()
            return text if text else None
        return value

    @model_validator(mode="after")
    def _validate(self):
        has_url = self.url_field_name is not None
        has_label = self.label_field_name is not None
        if has_url != has_label:
            raise ValueError(
                f"entry '{self.json_key}' must define both urlFieldName and labelFieldName or neither"
            )
        if has_url and self.kind == "hidden":
            raise ValueError(f"link entry '{self.json_key}' cannot be hidden")
        if has_url and self.url_field_name == self.label_field_name:
            raise ValueError(
                f"link entry '{self.json_key}' needs distinct urlFieldName and labelFieldName"
            )
        if self.number_format is not None and not (self.is_link or is_numeric_kind(self.kind)):
            raise ValueError(
                f"entry '{self.json_key}' of type '{self.kind}' cannot carry number formatting"
            )
        return self

    @property
    def is_link(self) -> bool:
        return self.url_field_name is not None and self.label_field_name is not None

    @property
    def is_hidden(self) -> bool:
        return self.kind == "hidden"


class ColumnMapping(BaseModel):
    """Ordered source-key to display-column configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    title: str = DEFAULT_TITLE
    link_id_key: str = Field(default=DEFAULT_LINK_ID_KEY, alias="linkIdKey", min_length=1)
    entries: tuple[MappingEntry, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _validate(self):
        seen: set[str] = set()
        for entry in self.entries:
            if entry.json_key in RESERVED_FIELDS:
                raise ValueError(f"jsonKey '{entry.json_key}' is reserved for the row position")
            if entry.json_key in seen:
                raise ValueError(f"duplicate jsonKey '{entry.json_key}' in column mapping")
            seen.add(entry.json_key)
        links = [entry for entry in self.entries if entry.is_link]
        if len(links) > 1:
            keys = ", ".join(entry.json_key for entry in links)
            raise ValueError(f"column mapping allows at most one link entry, got: {keys}")
        for entry in links:
            for derived in (entry.url_field_name, entry.label_field_name):
                if derived in RESERVED_FIELDS or derived in seen:
                    raise ValueError(
                        f"link field '{derived}' collides with a row field"
                    )
        return self

    @property
    def link_entry(self) -> Optional[MappingEntry]:
        for entry in self.entries:
            if entry.is_link:
                return entry
        return None

    @property
    def visible_entries(self) -> list[MappingEntry]:
        return [entry for entry in self.entries if not entry.is_hidden]

    def empty_title(self) -> str:
        return f"{self.title} (0)"


PAYEE_ASSOCIATION_ENTRIES: tuple[dict[str, Any], ...] = (
    {
        "jsonKey": "caseIssueName",
        "label": "Case Issue",
        "type": "url",
        "urlFieldName": "linkUrl",
        "labelFieldName": "linkLabel",
        "tooltip": DEFAULT_LINK_TOOLTIP,
    },
    {"jsonKey": "citationForm", "label": "Citation Form", "type": "text"},
    {
        "jsonKey": "factor",
        "label": "Factor",
        "type": "number",
        "typeAttributes": {"minimumIntegerDigits": 1, "maximumFractionDigits": 5},
    },
    {"jsonKey": "caseIssueId", "label": "Case Issue Id", "type": "hidden"},
)


def default_mapping() -> ColumnMapping:
    return ColumnMapping.model_validate(
        {"title": DEFAULT_TITLE, "entries": list(PAYEE_ASSOCIATION_ENTRIES)}
    )


def load_mapping(path: Path) -> ColumnMapping:
    """Load a column mapping from YAML.

    The file is either a mapping with ``title``/``link_id_key``/``entries`` or a
    bare list of entries (title and link key then take their defaults).
    """
    data = load_yaml(path, require_mapping=False)
    if isinstance(data, list):
        data = {"entries": data}
    if not isinstance(data, dict):
        raise TypeError(
            f"Column mapping in {path} must be a mapping or a list, got {type(data).__name__}"
        )
    return ColumnMapping.model_validate(data)
