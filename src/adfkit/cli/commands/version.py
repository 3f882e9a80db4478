# topmark:header:start
#
#   project      : ADFKit
#   file         : version.py
#   file_relpath : src/adfkit/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `version` command.

Prints the current ADFKit version as installed in the active Python environment,
together with the ADF format version it reads and writes.
"""

from __future__ import annotations

import click

from adfkit.cli.cli_types import OutputFormat
from adfkit.cli.options import output_format_option
from adfkit.cli.utils import emit_json, get_console, get_effective_verbosity
from adfkit.constants import ADFKIT_VERSION, SUPPORTED_ADF_VERSION


@click.command(
    name="version",
    help="Show the current version of ADFKit.",
)
@output_format_option
@click.pass_context
def version_command(ctx: click.Context, output_format: OutputFormat | None = None) -> None:
    """Show the current version of ADFKit.

    Args:
        ctx (click.Context): Click context.
        output_format (OutputFormat | None): Optional output format.
    """
    console = get_console(ctx)
    fmt: OutputFormat = output_format or OutputFormat.DEFAULT

    if fmt is OutputFormat.JSON:
        emit_json(console, {"version": ADFKIT_VERSION, "adf_version": SUPPORTED_ADF_VERSION})
    elif get_effective_verbosity(ctx) > 0:
        console.print(console.styled("ADFKit version:", bold=True, underline=True))
        console.print(f"    {console.styled(ADFKIT_VERSION, bold=True)}")
        console.print(f"    ADF format {SUPPORTED_ADF_VERSION}")
    else:
        console.print(console.styled(ADFKIT_VERSION, bold=True))
