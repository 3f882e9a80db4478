# topmark:header:start
#
#   project      : ADFKit
#   file         : evidence.py
#   file_relpath : src/adfkit/cli/commands/evidence.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `evidence` command.

Bundles the modules for a task (or the default-load set), validates every
metric constraint of the merged document and prints an evidence report.
Measured values come from ``--context`` (a JSON object of numbers) and,
with ``--auto-measure``, from line counts of the manifest's ``METRICS``
sources; explicit ``--context`` values win. In ``--ci`` mode a failing
constraint exits with `ExitCode.POLICY_VIOLATION`.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click

from adfkit.bundle.measure import MeasurementReport, measure_metric_sources
from adfkit.cli.cli_types import OutputFormat
from adfkit.cli.commands.bundle import print_token_summary, run_bundle
from adfkit.cli.console import ConsoleLike
from adfkit.cli.errors import AdfkitUsageError
from adfkit.cli.exit_codes import ExitCode
from adfkit.cli.options import ai_dir_option, output_format_option
from adfkit.cli.utils import (
    emit_json,
    get_config,
    get_console,
    plural,
    read_text,
    resolve_ai_dir,
)
from adfkit.config import AdfkitConfigError, validate_stale_threshold
from adfkit.core.model import Number, format_number
from adfkit.core.validator import (
    ConstraintStatus,
    EvidenceResult,
    StaleBaseline,
    detect_stale_baselines,
    validate_constraints,
)

STATUS_LABELS: dict[ConstraintStatus, tuple[str, str]] = {
    ConstraintStatus.PASS: ("ok", "green"),
    ConstraintStatus.WARN: ("WARN", "yellow"),
    ConstraintStatus.FAIL: ("FAIL", "red"),
}


def parse_context(raw: str) -> dict[str, Number]:
    """Parse a ``--context`` JSON object of metric values.

    Raises:
        AdfkitUsageError: If the JSON is invalid, not an object, or holds a
            non-numeric or non-finite value.
    """
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AdfkitUsageError(f"Invalid --context JSON: {e}") from e
    if not isinstance(data, dict):
        raise AdfkitUsageError("Invalid --context JSON: must be a JSON object")
    context: dict[str, Number] = {}
    for key, value in data.items():
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not math.isfinite(value)
        ):
            raise AdfkitUsageError(f"Invalid --context value for {key!r}: {value!r}")
        context[str(key)] = value
    return context


def _print_report(
    console: ConsoleLike,
    modules: tuple[str, ...],
    evidence: EvidenceResult,
    stale: list[StaleBaseline],
    measured: MeasurementReport | None,
    advisory_only: tuple[str, ...],
) -> None:
    console.print(console.styled("ADF Evidence Report", bold=True, underline=True))
    console.print(f"Modules loaded: {', '.join(modules)}")

    if measured is not None and measured.measurements:
        console.print()
        console.print("Auto-measured:")
        for m in measured.measurements:
            lines = f"{m.lines} lines" if m.lines is not None else f"[{m.error}]"
            console.print(f"  {m.metric}: {lines} ({m.path})")

    if stale:
        console.print()
        console.print("Stale baseline warnings:")
        for s in stale:
            console.warn(
                f"  [warn] {s.metric}: baseline {format_number(s.baseline)}, "
                f"current {format_number(s.current)}, delta {format_number(s.delta)}, "
                f"recommended ceiling {s.recommended_ceiling}"
            )

    ws = evidence.weight_summary
    console.print()
    console.print("Section weights:")
    console.print(f"  Load-bearing: {ws.load_bearing}")
    console.print(f"  Advisory: {ws.advisory}")
    console.print(f"  Unweighted: {ws.unweighted}")

    if advisory_only:
        console.print()
        console.print("Advisory-only modules:")
        for module in advisory_only:
            console.print(f"  [!] {module}: no load-bearing sections")

    console.print()
    if evidence.constraints:
        console.print("Constraints:")
        for c in evidence.constraints:
            label, color = STATUS_LABELS[c.status]
            console.print(f"  [{console.styled(label, fg=color)}] {c.message}")
    else:
        console.print("Constraints: (none)")

    console.print()
    verdict = "PASS" if evidence.all_passing else "FAIL"
    color = "green" if evidence.all_passing else "red"
    console.print(f"Verdict: {console.styled(verdict, bold=True, fg=color)}")
    if evidence.warn_count:
        console.print(f"({plural(evidence.warn_count, 'warning')} at ceiling boundary)")


@click.command(
    name="evidence", help="Validate metric constraints and print an evidence report."
)
@click.option(
    "--task", default=None, help="Task description; default-load modules only if omitted."
)
@ai_dir_option
@click.option("--context", "context_json", metavar="JSON", default=None, help="Measured values.")
@click.option(
    "--context-file",
    "context_file",
    type=click.Path(path_type=Path),
    default=None,
    help="Read measured values from a JSON file.",
)
@click.option("--auto-measure", is_flag=True, help="Count lines of the manifest METRICS sources.")
@click.option(
    "--stale-threshold", type=float, default=None, help="Stale baseline ratio (1.0-10.0)."
)
@click.option("--ci", "ci", is_flag=True, help="Exit non-zero when a constraint fails.")
@output_format_option
@click.pass_context
def evidence_command(
    ctx: click.Context,
    task: str | None,
    ai_dir: str | None,
    context_json: str | None,
    context_file: Path | None,
    auto_measure: bool,
    stale_threshold: float | None,
    ci: bool,
    output_format: OutputFormat | None,
) -> None:
    """Build the evidence report for the bundled document."""
    console = get_console(ctx)
    config = get_config(ctx)
    threshold = stale_threshold if stale_threshold is not None else config.stale_threshold
    try:
        validate_stale_threshold(threshold)
    except AdfkitConfigError as e:
        raise AdfkitUsageError(str(e)) from e
    if context_json is not None and context_file is not None:
        raise AdfkitUsageError("Provide at most one of '--context' or '--context-file'.")

    context: dict[str, Number] = {}
    if context_file is not None:
        context = parse_context(read_text(context_file))
    elif context_json is not None:
        context = parse_context(context_json)

    ai_path = resolve_ai_dir(ctx, ai_dir)
    run = run_bundle(ai_path, task)
    result = run.result

    measured: MeasurementReport | None = None
    if auto_measure:
        measured = measure_metric_sources(result.manifest, Path.cwd())
        context = {**measured.overrides, **context}

    overrides: Mapping[str, Number] | None = context or None
    evidence = validate_constraints(result.merged_document, overrides)
    stale = detect_stale_baselines(result.merged_document, overrides, threshold)

    if output_format is OutputFormat.JSON:
        payload: dict[str, object] = {
            "ai_dir": ai_path,
            "task": task,
            "keywords": run.keywords,
            "resolved_modules": result.resolved_modules,
            "token_estimate": result.token_estimate,
            "token_budget": result.token_budget,
            "token_utilization": result.token_utilization,
            "constraints": evidence.constraints,
            "weight_summary": evidence.weight_summary,
            "all_passing": evidence.all_passing,
            "fail_count": evidence.fail_count,
            "warn_count": evidence.warn_count,
            "stale_baselines": stale,
            "advisory_only_modules": result.advisory_only_modules,
        }
        if measured is not None:
            payload["auto_measured"] = measured.measurements
        emit_json(console, payload)
    else:
        _print_report(
            console,
            result.resolved_modules,
            evidence,
            stale,
            measured,
            result.advisory_only_modules,
        )
        print_token_summary(console, result)

    if ci and not evidence.all_passing:
        ctx.exit(ExitCode.POLICY_VIOLATION)
