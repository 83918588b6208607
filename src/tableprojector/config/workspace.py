from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tableprojector.config.mapping import ColumnMapping, default_mapping, load_mapping
from tableprojector.config.options import OUTPUT_FORMATS, RECORD_TRANSPORTS, VALID_LOG_LEVELS
from tableprojector.utils.load import load_yaml

WORKSPACE_FILENAME = "tableprojector.yaml"


class SharedDefaults(BaseModel):
    log_level: Optional[str] = Field(default=None, description="DEFAULT LOG LEVEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object):
        if value is None:
            return None
        text = str(value).strip().upper()
        if not text:
            return None
        if text not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got {value!r}"
            )
        return text


class SourceConfig(BaseModel):
    transport: str = Field(..., description="fs | url")
    path: Optional[str] = None
    url: Optional[str] = None
    field: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    encoding: str = "utf-8"

    @field_validator("transport", mode="before")
    @classmethod
    def _normalize_transport(cls, value):
        name = str(value or "").strip().lower()
        if name not in RECORD_TRANSPORTS:
            raise ValueError(
                f"transport must be one of {', '.join(RECORD_TRANSPORTS)}, got {value!r}"
            )
        return name

    @model_validator(mode="after")
    def _validate(self):
        if self.transport == "fs" and not self.path:
            raise ValueError("fs sources require a path")
        if self.transport == "url" and not self.url:
            raise ValueError("url sources require a url")
        return self

    def loader_kwargs(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class RenderDefaults(BaseModel):
    format: Optional[str] = None
    link_base_url: Optional[str] = None

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, value):
        if value is None:
            return None
        name = str(value).strip().lower()
        if name not in OUTPUT_FORMATS:
            raise ValueError(
                f"format must be one of {', '.join(OUTPUT_FORMATS)}, got {value!r}"
            )
        return name


class WorkspaceConfig(BaseModel):
    mapping: Optional[str] = None
    strict: bool = False
    shared: SharedDefaults = Field(default_factory=SharedDefaults)
    source: Optional[SourceConfig] = None
    render: RenderDefaults = Field(default_factory=RenderDefaults)


@dataclass
class WorkspaceContext:
    file_path: Path
    config: WorkspaceConfig

    @property
    def root(self) -> Path:
        return self.file_path.parent

    def resolve_path(self, raw: Optional[str]) -> Optional[Path]:
        if not raw:
            return None
        candidate = Path(raw)
        return (
            candidate.resolve()
            if candidate.is_absolute()
            else (self.root / candidate).resolve()
        )

    def resolve_mapping_path(self) -> Optional[Path]:
        return self.resolve_path(self.config.mapping)

    def load_mapping(self) -> ColumnMapping:
        path = self.resolve_mapping_path()
        return load_mapping(path) if path is not None else default_mapping()

    def source_kwargs(self) -> Optional[dict[str, Any]]:
        source = self.config.source
        if source is None:
            return None
        kwargs = source.loader_kwargs()
        if source.transport == "fs":
            kwargs["path"] = str(self.resolve_path(source.path))
        return kwargs


def load_workspace_context(start_dir: Optional[Path] = None) -> Optional[WorkspaceContext]:
    """Search from start_dir upward for tableprojector.yaml and return parsed config."""
    directory = (start_dir or Path.cwd()).resolve()
    for path in [directory, *directory.parents]:
        candidate = path / WORKSPACE_FILENAME
        if candidate.is_file():
            data = load_yaml(candidate)
            # Allow users to set sections to null to fall back to defaults
            for key in ("shared", "render"):
                if key in data and data[key] is None:
                    data.pop(key)
            cfg = WorkspaceConfig.model_validate(data)
            return WorkspaceContext(file_path=candidate, config=cfg)
    return None
