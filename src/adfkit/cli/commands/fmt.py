# topmark:header:start
#
#   project      : ADFKit
#   file         : fmt.py
#   file_relpath : src/adfkit/cli/commands/fmt.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `fmt` command.

Canonicalizes ADF files. Without flags the formatted text is written to
stdout; ``--write`` rewrites files in place and ``--check`` only reports,
exiting with `ExitCode.WOULD_CHANGE` when a file is not canonical.
"""

from __future__ import annotations

from pathlib import Path

import click

from adfkit.cli.cli_types import OutputFormat
from adfkit.cli.errors import AdfkitUsageError
from adfkit.cli.exit_codes import ExitCode
from adfkit.cli.options import output_format_option
from adfkit.cli.utils import (
    emit_json,
    get_console,
    read_text,
    translate_errors,
    write_text,
)
from adfkit.config.logging import get_logger
from adfkit.core.formatter import format_adf
from adfkit.core.parser import parse_adf

logger = get_logger(__name__)


@click.command(name="fmt", help="Format ADF files into canonical form.")
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--write", "write", is_flag=True, help="Rewrite files in place.")
@click.option("--check", "check", is_flag=True, help="Only report files that are not canonical.")
@output_format_option
@click.pass_context
def fmt_command(
    ctx: click.Context,
    files: tuple[Path, ...],
    write: bool,
    check: bool,
    output_format: OutputFormat | None,
) -> None:
    """Format each file; see the module docstring for the three modes."""
    if write and check:
        raise AdfkitUsageError("The '--write' and '--check' options are mutually exclusive.")
    console = get_console(ctx)
    as_json = output_format is OutputFormat.JSON

    results: list[dict[str, object]] = []
    for path in files:
        original = read_text(path)
        with translate_errors():
            formatted = format_adf(parse_adf(original))
        canonical = formatted == original
        logger.debug("%s canonical=%s", path, canonical)

        if check:
            results.append({"file": path, "canonical": canonical})
            if not as_json:
                if canonical:
                    console.print(f"[ok] {path} is canonical.")
                else:
                    console.warn(f"[warn] {path} is not in canonical format.")
        elif write:
            if not canonical:
                write_text(path, formatted)
            results.append({"file": path, "written": not canonical})
            if not as_json:
                console.print(f"[ok] {'Reformatted' if not canonical else 'Unchanged'} {path}")
        else:
            results.append({"file": path, "formatted": formatted})
            if not as_json:
                console.print(formatted, nl=False)

    if as_json:
        emit_json(console, {"files": results})
    if check and not all(r["canonical"] for r in results):
        if not as_json:
            console.print("Run: adfkit fmt --write <file>")
        ctx.exit(ExitCode.WOULD_CHANGE)
