# topmark:header:start
#
#   project      : ADFKit
#   file         : test_cli_init_fmt.py
#   file_relpath : tests/cli/test_cli_init_fmt.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI tests for `init` and `fmt`: scaffolding, check mode, in-place rewrite."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tests.cli.conftest import (
    assert_DATA_ERROR,
    assert_FILE_NOT_FOUND,
    assert_SUCCESS,
    assert_USAGE_ERROR,
    assert_WOULD_CHANGE,
    json_output,
    run_cli_in,
)
from tests.conftest import mark_cli

if TYPE_CHECKING:
    from pathlib import Path

MESSY = "FORMAT: 0.1\nNOTES: later\nTASK:   Ship it   \n"
CANONICAL = "ADF: 0.1\n\n\U0001f3af TASK: Ship it\n\nNOTES: later\n"


@mark_cli
def test_init_scaffold_is_canonical(tmp_path: Path) -> None:
    """Freshly scaffolded files pass ``fmt --check``."""
    result = run_cli_in(tmp_path, ["init"])
    assert_SUCCESS(result)
    assert "Initialized ADF context at .ai/" in result.output

    files = [".ai/manifest.adf", ".ai/core.adf", ".ai/state.adf"]
    for name in files:
        assert (tmp_path / name).is_file()

    check = run_cli_in(tmp_path, ["fmt", "--check", *files])
    assert_SUCCESS(check)
    assert check.output.count("is canonical") == 3


@mark_cli
def test_init_refuses_to_overwrite(tmp_path: Path) -> None:
    """An existing manifest is kept unless ``--force`` is given."""
    assert_SUCCESS(run_cli_in(tmp_path, ["init"]))
    manifest = tmp_path / ".ai" / "manifest.adf"
    manifest.write_text("ADF: 0.1\n", encoding="utf-8")

    again = run_cli_in(tmp_path, ["init", "--format", "json"])
    assert_SUCCESS(again)
    assert json_output(again)["created"] is False
    assert manifest.read_text(encoding="utf-8") == "ADF: 0.1\n"

    forced = run_cli_in(tmp_path, ["init", "--force"])
    assert_SUCCESS(forced)
    assert "DEFAULT_LOAD" in manifest.read_text(encoding="utf-8")


@mark_cli
def test_init_custom_ai_dir(tmp_path: Path) -> None:
    """``--ai-dir`` chooses the scaffold location."""
    result = run_cli_in(tmp_path, ["init", "--ai-dir", "ctx", "--format", "json"])
    assert_SUCCESS(result)
    payload = json_output(result)
    assert payload == {
        "created": True,
        "ai_dir": "ctx",
        "files": ["manifest.adf", "core.adf", "state.adf"],
    }


@mark_cli
def test_fmt_prints_canonical_text(tmp_path: Path) -> None:
    """Without flags the formatted text goes to stdout and the file is untouched."""
    (tmp_path / "a.adf").write_text(MESSY, encoding="utf-8")
    result = run_cli_in(tmp_path, ["--no-color", "fmt", "a.adf"])
    assert_SUCCESS(result)
    assert result.stdout == CANONICAL
    assert (tmp_path / "a.adf").read_text(encoding="utf-8") == MESSY


@mark_cli
def test_fmt_check_reports_would_change(tmp_path: Path) -> None:
    """A non-canonical file makes ``--check`` exit with WOULD_CHANGE."""
    (tmp_path / "a.adf").write_text(MESSY, encoding="utf-8")
    result = run_cli_in(tmp_path, ["fmt", "--check", "a.adf"])
    assert_WOULD_CHANGE(result)
    assert "a.adf is not in canonical format" in result.output
    assert "adfkit fmt --write" in result.output


@mark_cli
def test_fmt_check_json(tmp_path: Path) -> None:
    """JSON check output lists each file's status."""
    (tmp_path / "a.adf").write_text(MESSY, encoding="utf-8")
    (tmp_path / "b.adf").write_text(CANONICAL, encoding="utf-8")
    result = run_cli_in(tmp_path, ["fmt", "--check", "--format", "json", "a.adf", "b.adf"])
    assert_WOULD_CHANGE(result)
    assert json_output(result) == {
        "files": [
            {"file": "a.adf", "canonical": False},
            {"file": "b.adf", "canonical": True},
        ]
    }


@mark_cli
def test_fmt_write_rewrites_in_place(tmp_path: Path) -> None:
    """``--write`` canonicalizes the file; a second run leaves it unchanged."""
    target = tmp_path / "a.adf"
    target.write_text(MESSY, encoding="utf-8")

    first = run_cli_in(tmp_path, ["fmt", "--write", "a.adf"])
    assert_SUCCESS(first)
    assert "Reformatted a.adf" in first.output
    assert target.read_text(encoding="utf-8") == CANONICAL

    second = run_cli_in(tmp_path, ["fmt", "--write", "a.adf"])
    assert_SUCCESS(second)
    assert "Unchanged a.adf" in second.output


@mark_cli
def test_fmt_write_and_check_are_exclusive(tmp_path: Path) -> None:
    """Both modes at once is a usage error."""
    (tmp_path / "a.adf").write_text(CANONICAL, encoding="utf-8")
    assert_USAGE_ERROR(run_cli_in(tmp_path, ["fmt", "--write", "--check", "a.adf"]))


@mark_cli
def test_fmt_errors(tmp_path: Path) -> None:
    """Missing files and unsupported versions map to their exit codes."""
    assert_FILE_NOT_FOUND(run_cli_in(tmp_path, ["fmt", "missing.adf"]))

    (tmp_path / "v2.adf").write_text("ADF: 0.2\nTASK: x\n", encoding="utf-8")
    result = run_cli_in(tmp_path, ["fmt", "v2.adf"])
    assert_DATA_ERROR(result)
    assert "Unsupported ADF version: 0.2" in result.output
