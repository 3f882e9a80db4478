# topmark:header:start
#
#   project      : ADFKit
#   file         : errors.py
#   file_relpath : src/adfkit/cli/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions for the ADFKit CLI.

Usage:
    Raise these exceptions in CLI commands to signal errors with standardized
    messages and exit codes. Core errors (`AdfParseError`, `AdfPatchError`,
    `AdfBundleError`) are translated at the command boundary by
    `adfkit.cli.utils.translate_errors`.

Styling:
    Exceptions prefer the project console if available (see `show()`); if no console
    is present in the Click context, they fall back to Click's default styling.
"""

from __future__ import annotations

from typing import IO, Any

import click

from adfkit.cli.exit_codes import ExitCode


class AdfkitError(click.ClickException):
    """Base class for all ADFKit CLI errors."""

    exit_code = ExitCode.FAILURE

    def format_message(self) -> str:  # pragma: no cover - trivial
        """Return the plain error message text (colorized later in `show()`)."""
        return str(self.message)

    def show(self, file: IO[Any] | None = None) -> None:  # pragma: no cover - Click prints errors
        """Display the error using the project console if available."""
        ctx = click.get_current_context(silent=True)
        console = ctx.obj.get("console") if ctx is not None and isinstance(ctx.obj, dict) else None
        if console is None:
            super().show(file)
            return
        console.error(console.styled(f"Error: {self.format_message()}", fg="bright_red"))


class AdfkitUsageError(AdfkitError):
    """Error for command-line invocation errors (invalid flags/args)."""

    exit_code = ExitCode.USAGE_ERROR


class AdfkitDataError(AdfkitError):
    """Error for input that cannot be parsed or patched."""

    exit_code = ExitCode.DATA_ERROR


class AdfkitFileNotFoundError(AdfkitError):
    """Error when an input path does not exist."""

    exit_code = ExitCode.FILE_NOT_FOUND


class AdfkitIOError(AdfkitError):
    """Error for I/O errors reading/writing files."""

    exit_code = ExitCode.IO_ERROR


class AdfkitInvalidConfigError(AdfkitError):
    """Error for configuration errors (missing/invalid/malformed config)."""

    exit_code = ExitCode.CONFIG_ERROR
