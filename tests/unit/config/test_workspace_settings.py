import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from tableprojector.config.workspace import load_workspace_context


def _write_workspace(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "tableprojector.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_shared_log_level_is_normalized(tmp_path) -> None:
    _write_workspace(
        tmp_path,
        """
        shared:
          log_level: debug
        """,
    )

    context = load_workspace_context(tmp_path)

    assert context
    assert context.config.shared.log_level == "DEBUG"
    assert context.config.source is None
    assert context.config.strict is False


def test_invalid_log_level_rejected(tmp_path) -> None:
    _write_workspace(
        tmp_path,
        """
        shared:
          log_level: chatty
        """,
    )

    with pytest.raises(ValidationError, match="log_level must be one of"):
        load_workspace_context(tmp_path)


def test_workspace_found_from_nested_directory(tmp_path) -> None:
    _write_workspace(tmp_path, "strict: true\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    context = load_workspace_context(nested)

    assert context
    assert context.root == tmp_path.resolve()
    assert context.config.strict is True


def test_mapping_path_resolves_relative_to_workspace(tmp_path) -> None:
    _write_workspace(tmp_path, "mapping: config/columns.yaml\n")
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "columns.yaml").write_text(
        "title: Custom\nentries:\n  - jsonKey: a\n    label: A\n",
        encoding="utf-8",
    )

    context = load_workspace_context(tmp_path)

    assert context
    assert context.resolve_mapping_path() == (tmp_path / "config" / "columns.yaml").resolve()
    assert context.load_mapping().title == "Custom"


def test_missing_mapping_falls_back_to_default(tmp_path) -> None:
    _write_workspace(tmp_path, "render:\n  format: JSON\n")

    context = load_workspace_context(tmp_path)

    assert context
    assert context.config.render.format == "json"
    assert context.load_mapping().title == "Payee Association"


def test_fs_source_path_resolved(tmp_path) -> None:
    _write_workspace(
        tmp_path,
        """
        source:
          transport: FS
          path: records
          field: Payload__c
        """,
    )

    context = load_workspace_context(tmp_path)

    assert context
    kwargs = context.source_kwargs()
    assert kwargs["transport"] == "fs"
    assert kwargs["path"] == str((tmp_path / "records").resolve())
    assert kwargs["field"] == "Payload__c"


def test_url_source_requires_url(tmp_path) -> None:
    _write_workspace(
        tmp_path,
        """
        source:
          transport: url
        """,
    )

    with pytest.raises(ValidationError, match="url sources require a url"):
        load_workspace_context(tmp_path)


def test_null_sections_fall_back_to_defaults(tmp_path) -> None:
    _write_workspace(
        tmp_path,
        """
        shared:
        render:
        """,
    )

    context = load_workspace_context(tmp_path)

    assert context
    assert context.config.shared.log_level is None
    assert context.config.render.link_base_url is None
