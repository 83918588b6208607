import asyncio
import json

import pytest

from tableprojector.domain.errors import (
    FETCH_FALLBACK_MESSAGE,
    WAITING_MESSAGE,
    ErrorKind,
    UpstreamFetchError,
)
from tableprojector.projection.projector import TableProjector
from tableprojector.sources.records import FsRecordSource, RecordSource, StaticRecordSource
from tableprojector.widget import TableController


class _FailingSource(RecordSource):
    def __init__(self, message=None):
        self.message = message
        self.calls = []

    def fetch(self, record_id):
        self.calls.append(record_id)
        raise UpstreamFetchError(self.message)


def test_initial_state_is_waiting_not_failed() -> None:
    controller = TableController(TableProjector())

    state = controller.state
    assert state.title == "Payee Association"
    assert state.is_loading is True
    assert state.is_waiting is True
    assert state.error.message == WAITING_MESSAGE
    assert state.should_show_error is False


def test_receive_replaces_rows_and_clears_error(payee_payload) -> None:
    controller = TableController(TableProjector())

    state = controller.receive(payee_payload)

    assert state.title == "Payee Association (2)"
    assert state.error is None
    assert state.is_loading is False
    assert len(state.rows) == 2
    assert [column.label for column in state.columns] == ["Case Issue", "Citation Form", "Factor"]


def test_malformed_payload_resets_previous_output(payee_payload) -> None:
    controller = TableController(TableProjector())
    controller.receive(payee_payload)

    state = controller.receive("{not json")

    assert state.title == "Payee Association (0)"
    assert state.rows == ()
    assert state.columns == ()
    assert state.error.kind is ErrorKind.MALFORMED_JSON
    assert state.should_show_error is True


def test_unexpected_shape_is_reported() -> None:
    controller = TableController(TableProjector())

    state = controller.receive('{"caseIssueId": "a1"}')

    assert state.error.kind is ErrorKind.UNEXPECTED_SHAPE
    assert "expected an array of objects" in state.error.message
    assert state.title == "Payee Association (0)"


def test_empty_payload_shows_zero_title_without_error() -> None:
    controller = TableController(TableProjector())

    state = controller.receive(None)

    assert state.title == "Payee Association (0)"
    assert state.error is None
    assert state.rows == ()


def test_fail_uses_collaborator_message() -> None:
    controller = TableController(TableProjector())

    state = controller.fail(UpstreamFetchError("Record is locked"))

    assert state.error.kind is ErrorKind.UPSTREAM_FETCH
    assert state.error.message == "Record is locked"
    assert state.title == "Payee Association (0)"
    assert state.is_loading is False
    assert state.should_show_error is True


def test_fail_without_message_uses_fallback() -> None:
    controller = TableController(TableProjector())

    assert controller.fail().error.message == FETCH_FALLBACK_MESSAGE
    assert controller.fail(RuntimeError()).error.message == FETCH_FALLBACK_MESSAGE
    assert controller.fail(RuntimeError("socket closed")).error.message == "socket closed"


def test_load_without_record_id_waits(payee_payload) -> None:
    controller = TableController(TableProjector(), StaticRecordSource(payee_payload))
    controller.load("a0X1")

    state = controller.load(None)

    assert state.is_waiting is True
    assert state.should_show_error is False
    assert state.rows == ()


def test_load_fetches_and_projects(payee_payload) -> None:
    controller = TableController(TableProjector(), StaticRecordSource(payee_payload))

    state = controller.load("a0X1")

    assert state.title == "Payee Association (2)"
    assert state.rows[0]["linkUrl"] == "/a1"


def test_load_converts_fetch_errors() -> None:
    source = _FailingSource()
    controller = TableController(TableProjector(), source)

    state = controller.load("a0X1")

    assert source.calls == ["a0X1"]
    assert state.error.kind is ErrorKind.UPSTREAM_FETCH
    assert state.error.message == FETCH_FALLBACK_MESSAGE


def test_load_requires_source() -> None:
    controller = TableController(TableProjector())

    with pytest.raises(RuntimeError, match="no record source"):
        controller.load("a0X1")


def test_refresh_is_awaitable(payee_records) -> None:
    doubled = json.dumps(json.dumps(payee_records))
    controller = TableController(TableProjector(), StaticRecordSource(doubled))

    state = asyncio.run(controller.refresh("a0X1"))

    assert state.title == "Payee Association (2)"
    assert controller.state is state


def test_refresh_reports_fetch_failure() -> None:
    controller = TableController(TableProjector(), _FailingSource("Session expired"))

    state = asyncio.run(controller.refresh("a0X1"))

    assert state.error.message == "Session expired"


def test_load_reports_undecodable_record_file(tmp_path) -> None:
    (tmp_path / "r1.json").write_bytes(b'{"Payee_Association_JSON__c": "\xff\xfe"}')
    controller = TableController(TableProjector(), FsRecordSource(tmp_path))

    state = controller.load("r1")

    assert state.error.kind is ErrorKind.UPSTREAM_FETCH
    assert state.title == "Payee Association (0)"
    assert state.rows == ()
