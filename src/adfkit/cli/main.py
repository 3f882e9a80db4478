# topmark:header:start
#
#   project      : ADFKit
#   file         : main.py
#   file_relpath : src/adfkit/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit command-line entry point.

Group-level options (verbosity, color, config file) are resolved once and
placed into ``ctx.obj`` so that subcommands only read shared state:

* ``console``: the `ClickConsole` used for all program output,
* ``verbosity_level``: ``-1`` (quiet) to ``2``,
* ``config``: the resolved `AdfkitConfig`.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from adfkit.cli.commands.bundle import bundle_command
from adfkit.cli.commands.evidence import evidence_command
from adfkit.cli.commands.fmt import fmt_command
from adfkit.cli.commands.init import init_command
from adfkit.cli.commands.metrics import metrics_command
from adfkit.cli.commands.migrate import migrate_command
from adfkit.cli.commands.patch import patch_command
from adfkit.cli.commands.version import version_command
from adfkit.cli.console import ClickConsole
from adfkit.cli.options import (
    ColorMode,
    common_color_options,
    common_config_options,
    common_verbose_options,
    resolve_color_mode,
    resolve_verbosity,
)
from adfkit.cli.utils import translate_errors
from adfkit.config import load_config
from adfkit.config.logging import get_logger, resolve_env_log_level, setup_logging

if TYPE_CHECKING:
    from adfkit.cli.console import ConsoleLike

logger = get_logger(__name__)


def init_common_state(
    ctx: click.Context,
    *,
    verbose: int,
    quiet: int,
    color_mode: ColorMode | None,
    no_color: bool,
) -> None:
    """Initialize shared state (verbosity, logging and color) on the Click context.

    Args:
        ctx (click.Context): Current Click context; will have ``obj`` and ``color`` set.
        verbose (int): Count of ``-v`` flags.
        quiet (int): Count of ``-q`` flags.
        color_mode (ColorMode | None): Explicit color mode from ``--color`` (or ``None``).
        no_color (bool): Whether ``--no-color`` was passed; forces color off.
    """
    ctx.obj = ctx.obj or {}

    ctx.obj["verbosity_level"] = resolve_verbosity(verbose, quiet)

    effective_color_mode = ColorMode.NEVER if no_color else (color_mode or ColorMode.AUTO)
    enable_color = resolve_color_mode(cli_mode=effective_color_mode, output_format=None)
    ctx.obj["color_enabled"] = enable_color
    ctx.color = enable_color

    level_env = resolve_env_log_level()
    ctx.obj["log_level"] = level_env
    setup_logging(level=level_env, enable_color=enable_color)

    ctx.obj["console"] = ClickConsole(enable_color=enable_color)


@click.group(
    cls=click.Group,
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
    help="ADFKit: parse, format, patch, bundle and validate ADF context modules.",
)
@common_verbose_options
@common_color_options
@common_config_options
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: int,
    color_mode: ColorMode | None,
    no_color: bool,
    config_path: str | None,
) -> None:
    """Entry point for the ADFKit CLI."""
    init_common_state(
        ctx,
        verbose=verbose,
        quiet=quiet,
        color_mode=color_mode,
        no_color=no_color,
    )
    with translate_errors():
        ctx.obj["config"] = load_config(
            config_path=Path(config_path) if config_path is not None else None
        )
    console: ConsoleLike = ctx.obj["console"]

    if ctx.invoked_subcommand is None:
        console.print("Hint: use 'adfkit init' to scaffold an AI directory.")
        console.print()
        console.print(ctx.get_help())


cli.add_command(version_command)

cli.add_command(init_command)

cli.add_command(fmt_command)

cli.add_command(patch_command)

cli.add_command(bundle_command)

cli.add_command(evidence_command)

cli.add_command(migrate_command)

cli.add_command(metrics_command)

if __name__ == "__main__":
    cli()
