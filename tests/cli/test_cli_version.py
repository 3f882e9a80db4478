# topmark:header:start
#
#   project      : ADFKit
#   file         : test_cli_version.py
#   file_relpath : tests/cli/test_cli_version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI test: `version` command output."""

from __future__ import annotations

from adfkit.constants import ADFKIT_VERSION, SUPPORTED_ADF_VERSION
from tests.cli.conftest import assert_SUCCESS, json_output, run_cli


def test_version_outputs_package_version() -> None:
    """It should print the installed version and nothing else."""
    result = run_cli(["--no-color", "version"])
    assert_SUCCESS(result)
    assert result.output.strip() == ADFKIT_VERSION


def test_version_verbose_mentions_format_version() -> None:
    """With ``-v`` the ADF format version is shown too."""
    result = run_cli(["-v", "--no-color", "version"])
    assert_SUCCESS(result)
    assert f"ADF format {SUPPORTED_ADF_VERSION}" in result.output


def test_version_json() -> None:
    """JSON output carries both versions."""
    result = run_cli(["version", "--format", "json"])
    assert_SUCCESS(result)
    assert json_output(result) == {"version": ADFKIT_VERSION, "adf_version": SUPPORTED_ADF_VERSION}
