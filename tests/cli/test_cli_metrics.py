# topmark:header:start
#
#   project      : ADFKit
#   file         : test_cli_metrics.py
#   file_relpath : tests/cli/test_cli_metrics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI tests for `metrics recalibrate`: rewritten ceilings, rationale and previews."""

from __future__ import annotations

from typing import TYPE_CHECKING

from adfkit.core.parser import parse_adf
from adfkit.core.validator import validate_constraints
from tests.cli.conftest import (
    assert_DATA_ERROR,
    assert_FILE_NOT_FOUND,
    assert_SUCCESS,
    assert_USAGE_ERROR,
    json_output,
    run_cli_in,
)
from tests.conftest import CORE_ADF, MANIFEST_ADF, mark_cli, parametrize, write_files

if TYPE_CHECKING:
    from pathlib import Path


def _write_entry(project: Path, lines: int = 60) -> None:
    write_files(project, {"src/entry.py": "\n".join(["x = 1"] * lines)})


@mark_cli
def test_recalibrate_rewrites_module(project: Path) -> None:
    """Baseline and ceiling move to the measured value and a rationale is recorded."""
    _write_entry(project)

    result = run_cli_in(
        project, ["--no-color", "metrics", "recalibrate", "--reason", "entry split pending"]
    )

    assert_SUCCESS(result)
    out = result.output
    assert "Recalibration complete (1 metric update(s))" in out
    assert "Headroom policy: +15%" in out
    assert (
        "  - entry_loc [core.adf]: baseline 40, current 60, delta 20, ceiling 50 -> 69" in out
    )
    assert "Rationale: entry split pending" in out

    text = (project / ".ai" / "core.adf").read_text(encoding="utf-8")
    assert "entry_loc: 60 / 69 [lines]" in text
    assert "BUDGET_RATIONALES:" in text
    assert "40 -> 60, ceiling 50 -> 69; entry split pending" in text
    assert validate_constraints(parse_adf(text)).all_passing
    assert not list((project / ".ai").glob("*.tmp-*"))


@mark_cli
def test_recalibrate_dry_run_json(project: Path) -> None:
    """``--dry-run`` reports the changes without touching the module."""
    _write_entry(project, lines=130)

    result = run_cli_in(
        project,
        [
            "metrics",
            "recalibrate",
            "--auto-rationale",
            "--dry-run",
            "--headroom",
            "20",
            "--format",
            "json",
        ],
    )

    assert_SUCCESS(result)
    payload = json_output(result)
    assert payload["ai_dir"] == ".ai"
    assert payload["dry_run"] is True
    assert payload["headroom_percent"] == 20
    assert payload["metrics_updated"] == 1
    assert payload["modules_touched"] == ["core.adf"]
    assert payload["updates"] == [
        {
            "metric": "entry_loc",
            "module": "core.adf",
            "baseline": 40,
            "current": 130,
            "delta": 90,
            "previous_ceiling": 50,
            "recommended_ceiling": 156,
        }
    ]
    assert payload["rationale"].startswith("Recalibrated 1 metric baseline(s) on ")
    assert payload["rationale"].endswith("using +20% headroom from current measured LOC.")
    assert (project / ".ai" / "core.adf").read_text(encoding="utf-8") == CORE_ADF


@mark_cli
def test_recalibrate_custom_ai_dir(tmp_path: Path) -> None:
    write_files(tmp_path / "ctx", {"manifest.adf": MANIFEST_ADF, "core.adf": CORE_ADF})
    _write_entry(tmp_path, lines=10)

    result = run_cli_in(
        tmp_path, ["metrics", "recalibrate", "--ai-dir", "ctx", "--reason", "shrunk"]
    )

    assert_SUCCESS(result)
    text = (tmp_path / "ctx" / "core.adf").read_text(encoding="utf-8")
    assert "entry_loc: 10 / 12 [lines]" in text


@mark_cli
def test_recalibrate_without_measurement_changes_nothing(project: Path) -> None:
    """A missing metric source yields no update and no write."""
    result = run_cli_in(
        project, ["metrics", "recalibrate", "--reason", "noop", "--format", "json"]
    )

    assert_SUCCESS(result)
    assert json_output(result) == {
        "ai_dir": ".ai",
        "updated": False,
        "reason": "no matching metric entries found",
    }
    assert (project / ".ai" / "core.adf").read_text(encoding="utf-8") == CORE_ADF


@mark_cli
@parametrize(
    "args",
    [
        [],
        ["--reason", "   "],
        ["--reason", "why", "--auto-rationale"],
        ["--reason", "line one\nline two"],
        ["--auto-rationale", "--headroom", "0"],
        ["--auto-rationale", "--headroom", "201"],
    ],
)
def test_recalibrate_usage_errors(project: Path, args: list[str]) -> None:
    _write_entry(project)

    result = run_cli_in(project, ["metrics", "recalibrate", *args])

    assert_USAGE_ERROR(result)
    assert (project / ".ai" / "core.adf").read_text(encoding="utf-8") == CORE_ADF


@mark_cli
def test_recalibrate_missing_manifest(tmp_path: Path) -> None:
    result = run_cli_in(tmp_path, ["metrics", "recalibrate", "--auto-rationale"])

    assert_FILE_NOT_FOUND(result)
    assert "manifest.adf not found" in result.output


@mark_cli
def test_recalibrate_requires_metric_sources(project: Path) -> None:
    manifest = MANIFEST_ADF.replace("METRICS:\n  ENTRY_LOC: src/entry.py\n", "")
    write_files(project / ".ai", {"manifest.adf": manifest})

    result = run_cli_in(project, ["metrics", "recalibrate", "--auto-rationale"])

    assert_DATA_ERROR(result)
    assert "No METRICS sources found" in result.output
