from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

from pydantic import ValidationError

from tableprojector.config.mapping import ColumnMapping, default_mapping, load_mapping
from tableprojector.config.workspace import WorkspaceContext

_LOGGER = logging.getLogger("tableprojector.cli")


def error_exit(message: str, code: int = 2) -> NoReturn:
    _LOGGER.error(message)
    raise SystemExit(code)


def load_cli_mapping(mapping_path: Optional[str], workspace: Optional[WorkspaceContext]) -> ColumnMapping:
    """Mapping precedence: --mapping, then workspace ``mapping``, then the built-in default."""
    try:
        if mapping_path:
            return load_mapping(Path(mapping_path))
        if workspace is not None:
            return workspace.load_mapping()
        return default_mapping()
    except (FileNotFoundError, TypeError, ValueError, ValidationError) as exc:
        error_exit(f"Failed to load column mapping: {exc}")
