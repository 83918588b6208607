from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from tableprojector.cli.utils import error_exit, load_cli_mapping
from tableprojector.config.workspace import WorkspaceContext
from tableprojector.io.render import render_table, write_json
from tableprojector.projection.projector import TableProjector
from tableprojector.sources.records import RecordSource, StaticRecordSource, build_record_source
from tableprojector.widget import TableController, TableState

logger = logging.getLogger(__name__)

STDIN_RECORD_ID = "-"


def _read_payload(payload: str) -> str:
    if payload == "-":
        return sys.stdin.read()
    path = Path(payload)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        error_exit(f"Payload file not found: {path}")
    except OSError as exc:
        error_exit(f"Failed to read payload file {path}: {exc}")


def _resolve_source(
    payload: Optional[str],
    record_id: Optional[str],
    workspace: Optional[WorkspaceContext],
) -> tuple[Optional[RecordSource], Optional[str]]:
    if payload is not None:
        return StaticRecordSource(_read_payload(payload)), record_id or STDIN_RECORD_ID
    kwargs = workspace.source_kwargs() if workspace is not None else None
    if kwargs is None:
        if record_id:
            error_exit("--record-id requires a 'source' section in tableprojector.yaml")
        return None, None
    try:
        return build_record_source(**kwargs), record_id
    except ValueError as exc:
        error_exit(f"Invalid record source: {exc}")


def handle(
    *,
    payload: Optional[str],
    record_id: Optional[str],
    mapping_path: Optional[str],
    output_format: Optional[str],
    strict: Optional[bool],
    link_base_url: Optional[str],
    workspace: Optional[WorkspaceContext] = None,
    console: Optional[Console] = None,
) -> TableState:
    mapping = load_cli_mapping(mapping_path, workspace)
    render_defaults = workspace.config.render if workspace is not None else None
    if strict is None:
        strict = workspace.config.strict if workspace is not None else False
    fmt = output_format or (render_defaults.format if render_defaults else None) or "table"
    base_url = link_base_url or (render_defaults.link_base_url if render_defaults else None)

    source, resolved_id = _resolve_source(payload, record_id, workspace)
    controller = TableController(TableProjector(mapping, strict=strict), source)
    state = controller.load(resolved_id) if source is not None else controller.waiting()

    if fmt == "json":
        write_json(state, sys.stdout)
    else:
        render_table(state, console or Console(), link_base_url=base_url)

    if state.should_show_error:
        raise SystemExit(1)
    return state
