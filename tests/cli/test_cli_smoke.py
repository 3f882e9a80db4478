# topmark:header:start
#
#   project      : ADFKit
#   file         : test_cli_smoke.py
#   file_relpath : tests/cli/test_cli_smoke.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Smoke tests for the ADFKit CLI group: help, hints, shared options and config."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tests.cli.conftest import (
    assert_CONFIG_ERROR,
    assert_SUCCESS,
    assert_USAGE_ERROR,
    json_output,
    run_cli,
    run_cli_in,
)
from tests.conftest import mark_cli, parametrize, sample_ai_files, write_files

if TYPE_CHECKING:
    from pathlib import Path

SUBCOMMANDS = (
    "version",
    "init",
    "fmt",
    "patch",
    "bundle",
    "evidence",
    "migrate",
    "metrics",
)


@mark_cli
def test_no_subcommand_prints_hint_and_help(tmp_path: Path) -> None:
    """Running without a subcommand shows the scaffold hint and the group help."""
    result = run_cli_in(tmp_path, [])
    assert_SUCCESS(result)
    assert "Hint: use 'adfkit init'" in result.output
    for name in SUBCOMMANDS:
        assert name in result.output


@mark_cli
@parametrize("name", SUBCOMMANDS)
def test_subcommand_help(name: str) -> None:
    """Every subcommand answers ``--help``."""
    result = run_cli([name, "--help"])
    assert_SUCCESS(result)
    assert "Usage:" in result.output


@mark_cli
def test_verbose_and_quiet_are_exclusive() -> None:
    """``-v`` together with ``-q`` is a usage error."""
    result = run_cli(["-v", "-q", "version"])
    assert_USAGE_ERROR(result)
    assert "mutually exclusive" in result.output


@mark_cli
def test_invalid_config_value_is_a_config_error(tmp_path: Path) -> None:
    """A bad value in ``adfkit.toml`` stops the CLI with CONFIG_ERROR."""
    (tmp_path / "adfkit.toml").write_text('[migrate]\nmerge_strategy = "merge"\n', encoding="utf-8")
    result = run_cli_in(tmp_path, ["version"])
    assert_CONFIG_ERROR(result)
    assert "merge_strategy" in result.output


@mark_cli
def test_explicit_config_sets_ai_dir(tmp_path: Path) -> None:
    """``--config`` is merged last and redirects the AI directory."""
    write_files(tmp_path / "context", sample_ai_files())
    (tmp_path / "pyproject.toml").write_text(
        '[tool.adfkit]\nai_dir = "elsewhere"\n', encoding="utf-8"
    )
    (tmp_path / "ci.toml").write_text('ai_dir = "context"\n', encoding="utf-8")

    result = run_cli_in(
        tmp_path, ["--config", "ci.toml", "bundle", "--task", "UI", "--format", "json"]
    )

    assert_SUCCESS(result)
    assert json_output(result)["resolved_modules"] == ["core.adf", "state.adf", "frontend.adf"]
