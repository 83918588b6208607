import io
import json

import pytest
from rich.console import Console

from tableprojector.domain.table import ColumnDescriptor
from tableprojector.io.render import cell_text, format_number, render_table, state_payload, write_json
from tableprojector.projection.projector import TableProjector
from tableprojector.widget import TableController


def _console() -> Console:
    return Console(record=True, width=120, file=io.StringIO())


@pytest.mark.parametrize(
    ("value", "attrs", "expected"),
    [
        (0.25, {"minimumIntegerDigits": 1, "maximumFractionDigits": 5}, "0.25"),
        (0.123456789, {"maximumFractionDigits": 5}, "0.12346"),
        (1234567.891, None, "1,234,567.891"),
        (5, {"minimumIntegerDigits": 3}, "005"),
        (2, {"minimumFractionDigits": 2}, "2.00"),
        (-1.5, None, "-1.5"),
        (-0.0001, None, "0"),
        ("7.5", None, "7.5"),
        ("n/a", None, "n/a"),
        (None, None, ""),
    ],
)
def test_format_number(value, attrs, expected) -> None:
    assert format_number(value, attrs) == expected


def test_format_currency_uses_two_decimals() -> None:
    assert format_number(12.5, currency=True) == "12.50"
    assert format_number(1000, currency=True) == "1,000.00"


def test_link_cell_shows_label_with_hyperlink() -> None:
    column = TableProjector().columns[0]
    row = {"linkUrl": "/a1", "linkLabel": "Wage Claim"}

    text = cell_text(column, row, link_base_url="https://org.example.com/")

    assert text.plain == "Wage Claim"
    assert text.spans[0].style.link == "https://org.example.com/a1"


def test_link_cell_without_target_has_no_hyperlink() -> None:
    column = TableProjector().columns[0]

    text = cell_text(column, {"linkUrl": None, "linkLabel": "Orphan"})

    assert text.plain == "Orphan"
    assert text.spans == []


def test_number_cell_uses_column_hints() -> None:
    column = ColumnDescriptor(
        label="Factor",
        field_name="factor",
        type="number",
        type_attributes={"maximumFractionDigits": 2},
    )

    assert cell_text(column, {"factor": 0.123}).plain == "0.12"


def test_render_table_outputs_rows(payee_payload) -> None:
    state = TableController(TableProjector()).receive(payee_payload)
    console = _console()

    render_table(state, console)

    output = console.export_text()
    assert "Payee Association (2)" in output
    assert "Wage Claim" in output
    assert "12-CV" in output
    assert "0.25" in output
    assert "Case Issue Id" not in output


def test_render_error_state_shows_message() -> None:
    state = TableController(TableProjector()).receive("{not json")
    console = _console()

    render_table(state, console)

    output = console.export_text()
    assert "Payee Association (0)" in output
    assert "Expecting property name" in output


def test_render_waiting_state_hides_waiting_message() -> None:
    state = TableController(TableProjector()).state
    console = _console()

    render_table(state, console)

    output = console.export_text()
    assert "Loading" in output
    assert "Waiting for record ID" not in output


def test_state_payload_is_json_ready(payee_payload) -> None:
    state = TableController(TableProjector()).receive(payee_payload)

    payload = state_payload(state)

    assert payload["title"] == "Payee Association (2)"
    assert payload["error"] is None
    assert payload["columns"][0]["fieldName"] == "linkUrl"
    assert payload["rows"][1]["linkLabel"] == "Overtime"
    json.dumps(payload)


def test_write_json_includes_error() -> None:
    state = TableController(TableProjector()).receive("[1")
    buffer = io.StringIO()

    write_json(state, buffer)

    decoded = json.loads(buffer.getvalue())
    assert decoded["error"]["kind"] == "MALFORMED_JSON"
    assert decoded["rows"] == []
    assert decoded["title"] == "Payee Association (0)"
