# topmark:header:start
#
#   project      : ADFKit
#   file         : test_cli_bundle.py
#   file_relpath : tests/cli/test_cli_bundle.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI tests for `bundle`: module resolution, diagnostics and missing files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tests.cli.conftest import (
    assert_FILE_NOT_FOUND,
    assert_IO_ERROR,
    assert_SUCCESS,
    json_output,
    run_cli_in,
)
from tests.conftest import mark_cli

if TYPE_CHECKING:
    from pathlib import Path


@mark_cli
def test_bundle_text_report(project: Path) -> None:
    """The report lists resolution, triggers and the merged context."""
    result = run_cli_in(project, ["--no-color", "bundle", "--task", "Fix the React form"])

    assert_SUCCESS(result)
    out = result.output
    assert 'Task: "Fix the React form"' in out
    assert "Keywords: Fix, the, React, form" in out
    assert "Resolved modules: core.adf, state.adf, frontend.adf" in out
    assert "Token budget: 4000" in out
    assert "  [+] frontend.adf (React) <- react" in out
    assert "  [-] backend.adf (API)" in out
    assert "  [!] frontend.adf: no load-bearing sections" in out
    assert "  LINT_PASS: every commit" in out
    assert "--- Merged Context ---" in out
    assert "  - Prefer functional components" in out


@mark_cli
def test_bundle_json(project: Path) -> None:
    """JSON output exposes the resolution and per-module token counts."""
    result = run_cli_in(project, ["bundle", "--task", "API endpoints", "--format", "json"])

    assert_SUCCESS(result)
    payload = json_output(result)
    assert payload["keywords"] == ["API", "endpoints"]
    assert payload["resolved_modules"] == ["core.adf", "state.adf", "backend.adf"]
    assert payload["missing_modules"] == []
    assert set(payload["per_module_tokens"]) == set(payload["resolved_modules"])
    assert payload["token_budget"] == 4000
    assert payload["advisory_only_modules"] == []
    assert "Validate every request body" in payload["merged"]
    matched = [m for m in payload["trigger_matches"] if m["matched"]]
    assert [(m["module"], m["trigger"]) for m in matched] == [
        ("backend.adf", "API"),
        ("backend.adf", "Node"),
        ("backend.adf", "DB"),
    ]
    assert matched[0]["matched_keywords"] == ["api"]


@mark_cli
def test_bundle_skips_missing_on_demand_module(project: Path) -> None:
    """A triggered module without a file is reported and skipped."""
    result = run_cli_in(project, ["bundle", "--task", "Deploy", "--format", "json"])

    assert_SUCCESS(result)
    payload = json_output(result)
    assert payload["attempted_modules"] == ["core.adf", "state.adf", "infra.adf"]
    assert payload["resolved_modules"] == ["core.adf", "state.adf"]
    assert payload["missing_modules"] == ["infra.adf"]


@mark_cli
def test_bundle_missing_files(project: Path) -> None:
    """A missing default module or manifest is FILE_NOT_FOUND."""
    (project / ".ai" / "state.adf").unlink()
    result = run_cli_in(project, ["bundle", "--task", "anything"])
    assert_FILE_NOT_FOUND(result)
    assert "Default module not found: state.adf" in result.output

    (project / ".ai" / "manifest.adf").unlink()
    result = run_cli_in(project, ["bundle", "--task", "anything"])
    assert_FILE_NOT_FOUND(result)
    assert "Run: adfkit init" in result.output


@mark_cli
def test_bundle_undecodable_module(project: Path) -> None:
    """A module that is not valid UTF-8 exits with IO_ERROR naming the module."""
    (project / ".ai" / "core.adf").write_bytes(b"ADF: 0.1\n\nCONTEXT: caf\xe9\n")
    result = run_cli_in(project, ["bundle", "--task", "anything"])
    assert_IO_ERROR(result)
    assert not isinstance(result.exception, UnicodeDecodeError)
    assert "Bundle error (core.adf)" in result.output
