from __future__ import annotations

import json
from typing import Any, Mapping, Optional, TextIO

from rich.console import Console
from rich.markup import escape
from rich.style import Style
from rich.table import Table
from rich.text import Text

from tableprojector.config.options import is_numeric_kind
from tableprojector.domain.table import ColumnDescriptor, Row
from tableprojector.widget import TableState

# Intl.NumberFormat defaults
DEFAULT_MAX_FRACTION_DIGITS = 3
CURRENCY_FRACTION_DIGITS = 2


def _group_thousands(digits: str) -> str:
    head = len(digits) % 3 or 3
    parts = [digits[:head]]
    parts.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return ",".join(parts)


def format_number(value: Any, attributes: Optional[Mapping[str, Any]] = None, *, currency: bool = False) -> str:
    """Format ``value`` using datatable number hints (minimumIntegerDigits etc.)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value))
        except ValueError:
            return str(value)

    attrs = attributes or {}
    default_lo = CURRENCY_FRACTION_DIGITS if currency else 0
    default_hi = CURRENCY_FRACTION_DIGITS if currency else DEFAULT_MAX_FRACTION_DIGITS
    lo = attrs.get("minimumFractionDigits", default_lo)
    hi = attrs.get("maximumFractionDigits", default_hi)
    hi = max(hi, lo)
    min_int = attrs.get("minimumIntegerDigits", 1)

    text = f"{abs(number):.{hi}f}"
    int_part, _, frac = text.partition(".")
    frac = frac.rstrip("0")
    if len(frac) < lo:
        frac = frac.ljust(lo, "0")
    int_part = _group_thousands(int_part.zfill(min_int))
    sign = "-" if number < 0 and (int_part.strip("0,") or frac.strip("0")) else ""
    return f"{sign}{int_part}.{frac}" if frac else f"{sign}{int_part}"


def _link_url(url: str, link_base_url: Optional[str]) -> str:
    if not link_base_url:
        return url
    return link_base_url.rstrip("/") + url


def cell_text(column: ColumnDescriptor, row: Row, *, link_base_url: Optional[str] = None) -> Text:
    attrs = column.type_attributes
    label_ref = attrs.get("label") if isinstance(attrs, Mapping) else None
    if isinstance(label_ref, Mapping) and "fieldName" in label_ref:
        label = row.get(label_ref["fieldName"])
        url = row.get(column.field_name)
        text = Text("" if label is None else str(label))
        if url:
            text.stylize(Style(link=_link_url(url, link_base_url), underline=True))
        return text
    value = row.get(column.field_name)
    if is_numeric_kind(column.type):
        return Text(format_number(value, attrs, currency=column.type == "currency"))
    return Text("" if value is None else str(value))


def build_table(state: TableState, *, link_base_url: Optional[str] = None) -> Table:
    table = Table(title=state.title, title_justify="left")
    for column in state.columns:
        table.add_column(
            column.label,
            justify="right" if is_numeric_kind(column.type) else "left",
        )
    for row in state.rows:
        table.add_row(*(cell_text(column, row, link_base_url=link_base_url) for column in state.columns))
    return table


def render_table(state: TableState, console: Console, *, link_base_url: Optional[str] = None) -> None:
    if state.should_show_error:
        console.print(f"[bold]{escape(state.title)}[/bold]")
        console.print(f"[red]{escape(state.error.message)}[/red]")
        return
    if state.is_loading:
        console.print(f"[bold]{escape(state.title)}[/bold]")
        console.print("[dim]Loading...[/dim]")
        return
    if not state.columns:
        console.print(f"[bold]{escape(state.title)}[/bold]")
        return
    console.print(build_table(state, link_base_url=link_base_url))


def state_payload(state: TableState) -> dict[str, Any]:
    error = None
    if state.error is not None:
        error = {"kind": state.error.kind.value, "message": state.error.message}
    return {
        "title": state.title,
        "columns": [column.to_dict() for column in state.columns],
        "rows": [dict(row) for row in state.rows],
        "error": error,
        "isLoading": state.is_loading,
    }


def write_json(state: TableState, stream: TextIO) -> None:
    json.dump(state_payload(state), stream, indent=2, default=str)
    stream.write("\n")
