# topmark:header:start
#
#   project      : ADFKit
#   file         : init.py
#   file_relpath : src/adfkit/cli/commands/init.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `init` command.

Scaffolds an AI directory with a manifest, a default-load core module and a
state module. The scaffolds are built as documents and rendered by the
formatter, so a fresh directory is always canonical.
"""

from __future__ import annotations

import click

from adfkit.cli.cli_types import OutputFormat
from adfkit.cli.options import ai_dir_option, output_format_option
from adfkit.cli.utils import emit_json, get_console, resolve_ai_dir, write_text
from adfkit.constants import MANIFEST_FILENAME
from adfkit.core.formatter import format_adf
from adfkit.core.model import (
    AdfDocument,
    AdfSection,
    ListContent,
    MapContent,
    MapEntry,
    TextContent,
    Weight,
)

MANIFEST_SCAFFOLD = AdfDocument(
    sections=(
        AdfSection("ROLE", TextContent("Repo context router")),
        AdfSection("DEFAULT_LOAD", ListContent(("core.adf", "state.adf"))),
        AdfSection(
            "ON_DEMAND",
            ListContent(
                (
                    "frontend.adf (Triggers on: React, CSS, UI)",
                    "backend.adf (Triggers on: API, Node, DB)",
                )
            ),
        ),
        AdfSection(
            "RULES",
            ListContent(
                (
                    "Prefer smallest relevant module set.",
                    "Never assume unseen modules were loaded.",
                )
            ),
        ),
    )
)

CORE_SCAFFOLD = AdfDocument(
    sections=(
        AdfSection("TASK", TextContent("Define universal repository rules")),
        AdfSection(
            "CONTEXT",
            ListContent(
                (
                    "This file is loaded by default for every task.",
                    "Keep it lean; add domain-specific rules to on-demand modules.",
                )
            ),
        ),
        AdfSection(
            "CONSTRAINTS",
            ListContent(
                (
                    "Follow conventional commits.",
                    "No secrets in source code.",
                    "Prefer pure functions in library code.",
                )
            ),
            weight=Weight.LOAD_BEARING,
        ),
    )
)

STATE_SCAFFOLD = AdfDocument(
    sections=(
        AdfSection(
            "STATE",
            MapContent(
                (
                    MapEntry("CURRENT", "Repository initialized with ADF context system"),
                    MapEntry("NEXT", "Configure on-demand modules for your stack"),
                )
            ),
        ),
    )
)

SCAFFOLDS: dict[str, AdfDocument] = {
    MANIFEST_FILENAME: MANIFEST_SCAFFOLD,
    "core.adf": CORE_SCAFFOLD,
    "state.adf": STATE_SCAFFOLD,
}


@click.command(name="init", help="Scaffold an AI directory with a manifest and core modules.")
@ai_dir_option
@click.option("--force", is_flag=True, help="Overwrite an existing manifest.")
@output_format_option
@click.pass_context
def init_command(
    ctx: click.Context,
    ai_dir: str | None,
    force: bool,
    output_format: OutputFormat | None,
) -> None:
    """Write the scaffold files unless a manifest already exists."""
    console = get_console(ctx)
    target = resolve_ai_dir(ctx, ai_dir)
    as_json = output_format is OutputFormat.JSON

    if (target / MANIFEST_FILENAME).exists() and not force:
        if as_json:
            emit_json(console, {"created": False, "ai_dir": target, "files": []})
        else:
            console.print(f"{target}/{MANIFEST_FILENAME} already exists.")
            console.print("Use --force to overwrite.")
        return

    for name, doc in SCAFFOLDS.items():
        write_text(target / name, format_adf(doc))

    if as_json:
        emit_json(console, {"created": True, "ai_dir": target, "files": list(SCAFFOLDS)})
        return
    console.print(console.styled(f"Initialized ADF context at {target}/", bold=True))
    for name in SCAFFOLDS:
        console.print(f"  {name}")
