# topmark:header:start
#
#   project      : ADFKit
#   file         : bundle.py
#   file_relpath : src/adfkit/cli/commands/bundle.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `bundle` command.

Resolves the modules a task needs from ``manifest.adf``, merges them and
prints the merged context together with token and trigger diagnostics.
A missing default-load module is an error; a missing on-demand module is
reported and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click

from adfkit.bundle.bundler import BundleResult, bundle_modules, load_manifest
from adfkit.bundle.resolver import extract_keywords, resolve_modules
from adfkit.cli.cli_types import OutputFormat
from adfkit.cli.console import ConsoleLike
from adfkit.cli.errors import AdfkitFileNotFoundError
from adfkit.cli.options import ai_dir_option, output_format_option
from adfkit.cli.utils import (
    emit_json,
    get_console,
    read_file_for_bundle,
    resolve_ai_dir,
    translate_errors,
)
from adfkit.config.logging import get_logger
from adfkit.constants import MANIFEST_FILENAME
from adfkit.core.formatter import format_adf

logger = get_logger(__name__)


@dataclass(frozen=True)
class BundleRun:
    """A bundle plus the CLI-level context it was built from."""

    task: str | None
    keywords: tuple[str, ...]
    attempted_modules: tuple[str, ...]
    missing_modules: tuple[str, ...]
    result: BundleResult


def run_bundle(ai_dir: Path, task: str | None) -> BundleRun:
    """Resolve and bundle the modules for ``task`` (default-load only when None).

    Raises:
        AdfkitFileNotFoundError: If the manifest or a default-load module is missing.
        AdfkitDataError: If a file declares an unsupported format version.
        AdfkitIOError: If the manifest or a module cannot be read or decoded.
    """
    if not (ai_dir / MANIFEST_FILENAME).is_file():
        raise AdfkitFileNotFoundError(
            f"{MANIFEST_FILENAME} not found at {ai_dir / MANIFEST_FILENAME}. Run: adfkit init"
        )
    with translate_errors():
        manifest = load_manifest(ai_dir, read_file_for_bundle)
        keywords = extract_keywords(task) if task else []
        attempted = resolve_modules(manifest, keywords) if task else list(manifest.default_load)

        loadable: list[str] = []
        missing: list[str] = []
        for module in attempted:
            if (ai_dir / module).is_file():
                loadable.append(module)
            elif module in manifest.default_load:
                raise AdfkitFileNotFoundError(
                    f"Default module not found: {module} ({ai_dir / module})"
                )
            else:
                logger.info("On-demand module %s not found, skipping", module)
                missing.append(module)

        result = bundle_modules(ai_dir, loadable, read_file_for_bundle, keywords)
    return BundleRun(
        task=task,
        keywords=tuple(keywords),
        attempted_modules=tuple(attempted),
        missing_modules=tuple(missing),
        result=result,
    )


def print_token_summary(console: ConsoleLike, result: BundleResult) -> None:
    """Print the token estimate and budget utilization lines."""
    console.print(f"Token estimate: ~{result.token_estimate}")
    if result.token_budget is not None:
        pct = (
            f" ({result.token_utilization * 100:.0f}%)"
            if result.token_utilization is not None
            else ""
        )
        console.print(f"Token budget: {result.token_budget}{pct}")


def _print_report(console: ConsoleLike, run: BundleRun) -> None:
    result = run.result
    console.print(f'Task: "{run.task}"')
    console.print(f"Keywords: {', '.join(run.keywords)}")
    console.print(f"Resolved modules: {', '.join(result.resolved_modules)}")
    for module in run.missing_modules:
        console.warn(f"  [warn] {module} (module file not found)")
    print_token_summary(console, result)
    console.print()

    if result.module_budget_overruns:
        console.print("Module budget overruns:")
        for o in result.module_budget_overruns:
            console.print(f"  [!] {o.module}: ~{o.tokens} tokens (budget: {o.budget})")
        console.print()
    if result.trigger_matches:
        console.print("Trigger report:")
        for tm in result.trigger_matches:
            icon = console.styled("+", fg="green") if tm.matched else "-"
            kw = f" <- {', '.join(tm.matched_keywords)}" if tm.matched_keywords else ""
            console.print(f"  [{icon}] {tm.module} ({tm.trigger}){kw}")
        console.print()
    if result.unmatched_modules:
        console.print("Unmatched modules (not loaded):")
        for module in result.unmatched_modules:
            console.print(f"  [-] {module}")
        console.print()
    if result.advisory_only_modules:
        console.print("Advisory-only modules:")
        for module in result.advisory_only_modules:
            console.print(f"  [!] {module}: no load-bearing sections")
        console.print()
    if result.manifest.cadence:
        console.print("Cadence schedule:")
        for c in result.manifest.cadence:
            console.print(f"  {c.check}: {c.frequency}")
        console.print()

    console.print(console.styled("--- Merged Context ---", bold=True))
    console.print(format_adf(result.merged_document), nl=False)


@click.command(name="bundle", help="Resolve, merge and print the context modules for a task.")
@click.option("--task", required=True, help="Free-text task description.")
@ai_dir_option
@output_format_option
@click.pass_context
def bundle_command(
    ctx: click.Context,
    task: str,
    ai_dir: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Bundle the modules triggered by ``--task``."""
    console = get_console(ctx)
    run = run_bundle(resolve_ai_dir(ctx, ai_dir), task)

    if output_format is not OutputFormat.JSON:
        _print_report(console, run)
        return

    result = run.result
    emit_json(
        console,
        {
            "task": run.task,
            "keywords": run.keywords,
            "attempted_modules": run.attempted_modules,
            "resolved_modules": result.resolved_modules,
            "missing_modules": run.missing_modules,
            "token_estimate": result.token_estimate,
            "token_budget": result.token_budget,
            "token_utilization": result.token_utilization,
            "per_module_tokens": result.per_module_tokens,
            "module_budget_overruns": result.module_budget_overruns,
            "trigger_matches": result.trigger_matches,
            "unmatched_modules": result.unmatched_modules,
            "advisory_only_modules": result.advisory_only_modules,
            "cadence": result.manifest.cadence,
            "merged": format_adf(result.merged_document),
        },
    )
