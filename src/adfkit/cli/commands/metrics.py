# topmark:header:start
#
#   project      : ADFKit
#   file         : metrics.py
#   file_relpath : src/adfkit/cli/commands/metrics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `metrics` command group.

Currently one subcommand:

* ``adfkit metrics recalibrate``: measure the manifest's ``METRICS``
  sources, move each matching module baseline to the measured value, give
  its ceiling ``--headroom`` percent of room and record why in the module's
  ``BUDGET_RATIONALES`` section.

Module files are rewritten only after every new module text has been written
to a temporary file next to its target, so a failed run leaves the originals
untouched.
"""

from __future__ import annotations

import datetime as dt
import os
from pathlib import Path

import click

from adfkit.bundle.bundler import load_manifest
from adfkit.bundle.measure import measure_metric_sources
from adfkit.bundle.recalibrate import (
    MAX_HEADROOM_PERCENT,
    MIN_HEADROOM_PERCENT,
    ModuleRecalibration,
    auto_rationale,
    manifest_module_paths,
    recalibrate_modules,
    record_rationale,
)
from adfkit.cli.cli_types import OutputFormat
from adfkit.cli.errors import (
    AdfkitDataError,
    AdfkitFileNotFoundError,
    AdfkitIOError,
    AdfkitUsageError,
)
from adfkit.cli.options import ai_dir_option, output_format_option
from adfkit.cli.utils import (
    emit_json,
    get_console,
    read_file_for_bundle,
    read_text,
    resolve_ai_dir,
    translate_errors,
)
from adfkit.config.logging import get_logger
from adfkit.constants import DEFAULT_HEADROOM_PERCENT, MANIFEST_FILENAME
from adfkit.core.formatter import format_adf
from adfkit.core.model import AdfDocument, format_number
from adfkit.core.parser import parse_adf

logger = get_logger(__name__)


def write_modules_atomically(ai_dir: Path, modules: list[ModuleRecalibration]) -> None:
    """Write every recalibrated module, replacing the originals only at the end.

    Raises:
        AdfkitIOError: If a temporary file cannot be written or moved into place.
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for module in modules:
            target = ai_dir / module.module
            temp = target.with_name(f"{target.name}.tmp-{os.getpid()}")
            temp.write_text(format_adf(module.document), encoding="utf-8", newline="\n")
            staged.append((temp, target))
        for temp, target in staged:
            temp.replace(target)
            logger.debug("Replaced %s", target)
    except OSError as e:
        for temp, _ in staged:
            temp.unlink(missing_ok=True)
        raise AdfkitIOError(f"Cannot write recalibrated modules: {e}") from e


@click.group(
    name="metrics",
    help="Metric budget utilities. Subcommands: recalibrate.",
)
def metrics_command() -> None:
    """Metric budget utilities."""


@metrics_command.command(
    name="recalibrate",
    help="Move metric baselines to measured values and reset ceilings with headroom.",
)
@ai_dir_option
@click.option(
    "--headroom",
    "headroom_percent",
    type=int,
    default=DEFAULT_HEADROOM_PERCENT,
    show_default=True,
    help="Ceiling headroom above the measured value, in percent (1 to 200).",
)
@click.option("--reason", default=None, help="Single-line rationale recorded with each change.")
@click.option(
    "--auto-rationale",
    "auto_rationale_flag",
    is_flag=True,
    help="Record a generated rationale instead of --reason.",
)
@click.option("--dry-run", is_flag=True, help="Show the changes without writing files.")
@output_format_option
@click.pass_context
def recalibrate_command(
    ctx: click.Context,
    ai_dir: str | None,
    headroom_percent: int,
    reason: str | None,
    auto_rationale_flag: bool,
    dry_run: bool,
    output_format: OutputFormat | None,
) -> None:
    """Recalibrate module ``METRICS`` from the manifest's metric sources."""
    console = get_console(ctx)
    ai_path = resolve_ai_dir(ctx, ai_dir)

    if not (ai_path / MANIFEST_FILENAME).is_file():
        raise AdfkitFileNotFoundError(
            f"{MANIFEST_FILENAME} not found at {ai_path / MANIFEST_FILENAME}. Run: adfkit init"
        )
    if not MIN_HEADROOM_PERCENT <= headroom_percent <= MAX_HEADROOM_PERCENT:
        raise AdfkitUsageError(
            f"Invalid --headroom value: {headroom_percent}. "
            f"Use an integer between {MIN_HEADROOM_PERCENT} and {MAX_HEADROOM_PERCENT}."
        )
    if reason is not None and auto_rationale_flag:
        raise AdfkitUsageError("Provide at most one of '--reason' or '--auto-rationale'.")
    if not auto_rationale_flag and not (reason and reason.strip()):
        raise AdfkitUsageError(
            "metrics recalibrate requires --reason \"<rationale>\" or --auto-rationale."
        )
    if reason is not None and ("\n" in reason or "\r" in reason):
        raise AdfkitUsageError("--reason must be a single line.")

    with translate_errors():
        manifest = load_manifest(ai_path, read_file_for_bundle)
    if not manifest.metrics:
        raise AdfkitDataError(
            f"No METRICS sources found in {MANIFEST_FILENAME}; cannot recalibrate."
        )

    measured = measure_metric_sources(manifest, Path.cwd()).overrides

    modules: dict[str, AdfDocument] = {}
    with translate_errors():
        for module in manifest_module_paths(manifest):
            path = ai_path / module
            if not path.is_file():
                logger.info("Module %s not found, skipping", module)
                continue
            modules[module] = parse_adf(read_text(path))

    results = recalibrate_modules(modules, measured, headroom_percent)
    updates = [u for m in results for u in m.updates]
    if not updates:
        if output_format is OutputFormat.JSON:
            emit_json(
                console,
                {
                    "ai_dir": ai_path,
                    "updated": False,
                    "reason": "no matching metric entries found",
                },
            )
        else:
            console.print("No matching metric entries found in module METRICS sections.")
        return

    today = dt.date.today()
    rationale = (
        auto_rationale(headroom_percent, len(updates), today)
        if auto_rationale_flag
        else (reason or "").strip()
    )
    with translate_errors():
        results = [record_rationale(m, rationale, today) for m in results]

    if not dry_run:
        write_modules_atomically(ai_path, results)

    if output_format is OutputFormat.JSON:
        emit_json(
            console,
            {
                "ai_dir": ai_path,
                "dry_run": dry_run,
                "headroom_percent": headroom_percent,
                "metrics_updated": len(updates),
                "modules_touched": [m.module for m in results],
                "updates": [
                    {
                        "metric": u.metric,
                        "module": u.module,
                        "baseline": u.baseline,
                        "current": u.current,
                        "delta": u.delta,
                        "previous_ceiling": u.previous_ceiling,
                        "recommended_ceiling": u.recommended_ceiling,
                    }
                    for u in updates
                ],
                "rationale": rationale,
            },
        )
        return

    status = "preview" if dry_run else "complete"
    console.print(f"Recalibration {status} ({len(updates)} metric update(s))")
    console.print(f"Headroom policy: +{headroom_percent}%")
    for u in updates:
        console.print(
            f"  - {u.metric} [{u.module}]: baseline {format_number(u.baseline)}, "
            f"current {u.current}, delta {format_number(u.delta)}, "
            f"ceiling {format_number(u.previous_ceiling)} -> {u.recommended_ceiling}"
        )
    console.print(f"Rationale: {rationale}")
