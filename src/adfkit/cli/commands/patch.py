# topmark:header:start
#
#   project      : ADFKit
#   file         : patch.py
#   file_relpath : src/adfkit/cli/commands/patch.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `patch` command.

Applies a JSON patch batch to an ADF file. The batch is all-or-nothing: when
any operation fails, nothing is written and the command exits with
`ExitCode.DATA_ERROR`.

Example::

    adfkit patch .ai/core.adf --write \\
        --ops '[{"op": "ADD_BULLET", "section": "CONSTRAINTS", "value": "No force pushes"}]'
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from adfkit.cli.cli_types import OutputFormat
from adfkit.cli.errors import AdfkitDataError, AdfkitUsageError
from adfkit.cli.options import output_format_option
from adfkit.cli.utils import (
    emit_json,
    get_console,
    plural,
    read_text,
    translate_errors,
    write_text,
)
from adfkit.core.formatter import format_adf
from adfkit.core.parser import parse_adf
from adfkit.core.patcher import apply_patches, patch_ops_from_json


@click.command(name="patch", help="Apply a batch of typed patch operations to an ADF file.")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--ops", "ops_json", metavar="JSON", default=None, help="Patch batch as JSON.")
@click.option(
    "--ops-file",
    "ops_file",
    type=click.Path(path_type=Path),
    default=None,
    help="Read the patch batch from a JSON file.",
)
@click.option("--write", "write", is_flag=True, help="Write the result back to FILE.")
@output_format_option
@click.pass_context
def patch_command(
    ctx: click.Context,
    file: Path,
    ops_json: str | None,
    ops_file: Path | None,
    write: bool,
    output_format: OutputFormat | None,
) -> None:
    """Apply the batch; print the patched document unless ``--write`` is given."""
    if (ops_json is None) == (ops_file is None):
        raise AdfkitUsageError("Provide exactly one of '--ops' or '--ops-file'.")
    console = get_console(ctx)
    raw = read_text(ops_file) if ops_file is not None else str(ops_json)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AdfkitDataError(f"Invalid --ops JSON: {e}") from e

    with translate_errors():
        ops = patch_ops_from_json(data)
        patched = apply_patches(parse_adf(read_text(file)), ops)
    output = format_adf(patched)

    if write:
        write_text(file, output)
    if output_format is OutputFormat.JSON:
        payload: dict[str, object] = {"file": file, "ops_applied": len(ops), "written": write}
        if not write:
            payload["content"] = output
        emit_json(console, payload)
    elif write:
        console.print(f"[ok] Applied {plural(len(ops), 'operation')} to {file}")
    else:
        console.print(output, nl=False)
