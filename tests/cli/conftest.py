# topmark:header:start
#
#   project      : ADFKit
#   file         : conftest.py
#   file_relpath : tests/cli/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI test helpers for running ADFKit in a controlled working directory.

`run_cli_in()` changes the process working directory to a temporary project
before invoking the Click CLI, so the default ``.ai`` directory, the agent
config files scanned by ``migrate`` and config discovery (``adfkit.toml``,
``pyproject.toml``) all resolve against the test directory.
"""

from __future__ import annotations

import json
import os
from typing import IO, TYPE_CHECKING, Any, Sequence

import pytest
from click.testing import CliRunner, Result

from adfkit.cli.exit_codes import ExitCode
from adfkit.cli.main import cli
from tests.conftest import sample_ai_files, write_files

if TYPE_CHECKING:
    from pathlib import Path


def run_cli_in(
    tmp_path: Path,
    argv: str | Sequence[str] | None,
    *,
    input_text: str | bytes | IO[Any] | None = None,
) -> Result:
    """Invoke the CLI with `tmp_path` as the working directory.

    Args:
        tmp_path (Path): Directory used as the CWD for the command invocation.
        argv (str | Sequence[str] | None): CLI argument vector, e.g. ``["fmt", "--check", "x"]``.
        input_text (str | bytes | IO[Any] | None): Optional standard input.

    Returns:
        Result: The `click.testing.Result` produced by `CliRunner.invoke`.

    Example:
        ```python
        res = run_cli_in(tmp_path, ["bundle", "--task", "Fix the UI"])
        assert res.exit_code == ExitCode.SUCCESS
        ```
    """
    runner = CliRunner()
    cwd: str = os.getcwd()
    try:
        os.chdir(tmp_path)
        return runner.invoke(cli, argv, input=input_text)
    finally:
        os.chdir(cwd)


def run_cli(
    argv: str | Sequence[str] | None,
    *,
    input_text: str | bytes | IO[Any] | None = None,
) -> Result:
    """Invoke the CLI without changing the working directory.

    Use this helper for commands that do not touch the filesystem
    (``--help``, ``version``).
    """
    runner = CliRunner()
    return runner.invoke(cli, argv, input=input_text)


def json_output(result: Result) -> Any:
    """Decode the JSON document printed on stdout by a ``--format json`` run."""
    return json.loads(result.stdout)


def assert_SUCCESS(result: Result) -> None:
    """Assert that the command exited successfully (code 0)."""
    assert result.exit_code == ExitCode.SUCCESS, result.output


def assert_WOULD_CHANGE(result: Result) -> None:
    """Assert that the command exited with WOULD_CHANGE (code 2)."""
    # WOULD_CHANGE is a *normal* outcome of `fmt --check`.
    assert result.exit_code == ExitCode.WOULD_CHANGE, result.output


def assert_POLICY_VIOLATION(result: Result) -> None:
    """Assert that the command exited with POLICY_VIOLATION (code 3)."""
    assert result.exit_code == ExitCode.POLICY_VIOLATION, result.output


def assert_USAGE_ERROR(result: Result) -> None:
    """Assert that the command exited with USAGE_ERROR (code 64)."""
    assert result.exit_code == ExitCode.USAGE_ERROR, result.output


def assert_DATA_ERROR(result: Result) -> None:
    """Assert that the command exited with DATA_ERROR (code 65)."""
    assert result.exit_code == ExitCode.DATA_ERROR, result.output


def assert_FILE_NOT_FOUND(result: Result) -> None:
    """Assert that the command exited with FILE_NOT_FOUND (code 66)."""
    assert result.exit_code == ExitCode.FILE_NOT_FOUND, result.output


def assert_IO_ERROR(result: Result) -> None:
    """Assert that the command exited with IO_ERROR (code 74)."""
    assert result.exit_code == ExitCode.IO_ERROR, result.output


def assert_CONFIG_ERROR(result: Result) -> None:
    """Assert that the command exited with CONFIG_ERROR (code 78)."""
    assert result.exit_code == ExitCode.CONFIG_ERROR, result.output


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project directory holding a populated ``.ai`` directory.

    Args:
        tmp_path (Path): The pytest-provided temporary directory.

    Returns:
        Path: The project root (pass it to `run_cli_in`).
    """
    root = tmp_path / "proj"
    write_files(root / ".ai", sample_ai_files())
    return root
