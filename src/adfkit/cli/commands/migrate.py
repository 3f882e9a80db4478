# topmark:header:start
#
#   project      : ADFKit
#   file         : migrate.py
#   file_relpath : src/adfkit/cli/commands/migrate.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit `migrate` command.

Scans agent config files (``CLAUDE.md``, ``.cursorrules``, ...), classifies
their markdown content and merges the portable rules into ADF modules under
the AI directory. Each migrated source is backed up (unless disabled) and
replaced by a thin pointer that keeps the environment-specific rules.

With ``--dry-run`` nothing is written; the per-item classification and the
action plan are printed instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import click

from adfkit.cli.cli_types import EnumChoiceParam, OutputFormat
from adfkit.cli.console import ConsoleLike
from adfkit.cli.options import ai_dir_option, output_format_option
from adfkit.cli.utils import (
    emit_json,
    get_config,
    get_console,
    read_text,
    resolve_ai_dir,
    translate_errors,
    write_text,
)
from adfkit.config.logging import get_logger
from adfkit.core.errors import AdfParseError
from adfkit.core.formatter import format_adf
from adfkit.core.model import AdfDocument
from adfkit.core.parser import parse_adf
from adfkit.migrate.classifier import MigrationPlan, RouteDecision, build_migration_plan
from adfkit.migrate.markdown import parse_markdown_sections
from adfkit.migrate.patterns import CORE_MODULE
from adfkit.migrate.planner import (
    BACKUP_SUFFIX,
    MergeStrategy,
    SectionGroups,
    group_by_module,
    is_thin_pointer,
    migrate_module,
    render_thin_pointer,
    retained_items,
)

logger = get_logger(__name__)

MAX_PREVIEW_LENGTH = 50


class ActionType(str, Enum):
    """Kinds of planned migration actions."""

    MERGE = "MERGE"
    KEEP = "KEEP"
    BACKUP = "BACKUP"


@dataclass(frozen=True)
class MigrationAction:
    """One planned file action, shown in the report."""

    type: ActionType
    target: str
    detail: str


@dataclass
class SourceMigration:
    """Result of migrating (or planning to migrate) one source file."""

    source: str
    skipped: bool = False
    skip_reason: str | None = None
    line_count: int = 0
    section_count: int = 0
    plan: MigrationPlan | None = None
    actions: list[MigrationAction] = field(default_factory=list)


def load_dedupe_baseline(ai_dir: Path) -> AdfDocument | None:
    """Parse ``core.adf`` for deduplication, or return None when unusable."""
    core_path = ai_dir / CORE_MODULE
    if not core_path.is_file():
        return None
    try:
        return parse_adf(read_text(core_path))
    except AdfParseError as e:
        logger.warning("Cannot parse %s, migrating without deduplication: %s", core_path, e)
        return None


def plan_actions(
    source: str,
    ai_dir: Path,
    plan: MigrationPlan,
    groups: dict[str, SectionGroups],
    backup: bool,
) -> list[MigrationAction]:
    """Describe the file actions a migration of ``source`` performs."""
    actions: list[MigrationAction] = []
    for module, section_groups in groups.items():
        counts = ", +".join(f"{len(items)} {key.value}" for key, items in section_groups.items())
        actions.append(
            MigrationAction(type=ActionType.MERGE, target=str(ai_dir / module), detail=f"+{counts}")
        )
    retained = retained_items(plan.stay_items)
    actions.append(
        MigrationAction(
            type=ActionType.KEEP,
            target=source,
            detail=(
                f"thin pointer + {len(retained)} retained env rules"
                if plan.stay_items
                else "thin pointer (no retained items)"
            ),
        )
    )
    if backup:
        actions.append(
            MigrationAction(
                type=ActionType.BACKUP,
                target=f"{source}{BACKUP_SUFFIX}",
                detail=f"Backup of {source}",
            )
        )
    return actions


def migrate_source(
    source: str,
    ai_dir: Path,
    strategy: MergeStrategy,
    *,
    dry_run: bool,
    backup: bool,
) -> SourceMigration:
    """Classify one source file and, unless ``dry_run``, apply the migration.

    Raises:
        AdfkitIOError: If a file cannot be read or written.
        AdfkitDataError: If an existing module cannot be parsed or patched.
    """
    path = Path(source)
    if not path.is_file():
        return SourceMigration(source=source, skipped=True, skip_reason="File not found")

    text = read_text(path)
    line_count = len(text.split("\n"))
    if is_thin_pointer(text):
        return SourceMigration(
            source=source,
            skipped=True,
            skip_reason="Already a thin pointer",
            line_count=line_count,
        )

    sections = parse_markdown_sections(text)
    existing = load_dedupe_baseline(ai_dir) if strategy is MergeStrategy.DEDUPE else None
    plan = build_migration_plan(sections, existing)
    groups = group_by_module(plan.migrate_items)
    actions = plan_actions(source, ai_dir, plan, groups, backup)

    if not dry_run:
        if backup:
            write_text(path.with_name(path.name + BACKUP_SUFFIX), text)
        with translate_errors():
            for module, section_groups in groups.items():
                module_path = ai_dir / module
                doc = parse_adf(read_text(module_path)) if module_path.is_file() else AdfDocument()
                write_text(module_path, format_adf(migrate_module(doc, section_groups, strategy)))
        pointer = render_thin_pointer(source, ai_dir.as_posix(), retained_items(plan.stay_items))
        write_text(path, pointer)
        logger.info("Migrated %s into %d module(s)", source, len(groups))

    return SourceMigration(
        source=source,
        line_count=line_count,
        section_count=len(sections),
        plan=plan,
        actions=actions,
    )


def _preview(text: str) -> str:
    if len(text) <= MAX_PREVIEW_LENGTH:
        return text
    return text[: MAX_PREVIEW_LENGTH - 3] + "..."


def _print_result(console: ConsoleLike, result: SourceMigration) -> None:
    console.print(
        f"Source: {result.source} ({result.line_count} lines, {result.section_count} sections)"
    )
    if result.skipped:
        console.print(f"  Skipped: {result.skip_reason}")
        console.print()
        return
    if result.plan is None:
        return

    for item in result.plan.items:
        c = item.classification
        if c.decision is RouteDecision.STAY:
            route = f"STAY ({c.reason})"
        else:
            route = f"{c.target_section.value} [{c.weight.value}]  {c.target_module}"
        console.print(f'  "{_preview(item.element.content)}"  -> {route}')
    console.print()

    console.print("Plan:")
    for action in result.actions:
        console.print(f"  {action.type.value} {action.target}  ({action.detail})")
    console.print()


@click.command(name="migrate", help="Migrate agent config markdown into ADF modules.")
@click.option(
    "--source",
    "source",
    metavar="FILE",
    default=None,
    help="Migrate this file instead of the configured agent config files.",
)
@ai_dir_option
@click.option(
    "--merge-strategy",
    "merge_strategy",
    type=EnumChoiceParam(MergeStrategy),
    default=None,
    help="How items merge into existing sections (append, dedupe, replace).",
)
@click.option("--dry-run", is_flag=True, help="Show the plan without writing any file.")
@click.option("--no-backup", is_flag=True, help="Do not back up migrated source files.")
@output_format_option
@click.pass_context
def migrate_command(
    ctx: click.Context,
    source: str | None,
    ai_dir: str | None,
    merge_strategy: MergeStrategy | None,
    dry_run: bool,
    no_backup: bool,
    output_format: OutputFormat | None,
) -> None:
    """Migrate agent config files into ADF modules."""
    console = get_console(ctx)
    config = get_config(ctx)
    strategy = merge_strategy or MergeStrategy(config.merge_strategy)
    backup = config.backup and not no_backup
    ai_path = resolve_ai_dir(ctx, ai_dir)

    sources = [source] if source is not None else [s for s in config.sources if Path(s).is_file()]
    if not sources:
        if output_format is OutputFormat.JSON:
            emit_json(
                console,
                {
                    "migrated": False,
                    "reason": "No agent config files found",
                    "scanned": config.sources,
                },
            )
        else:
            console.print("No agent config files found to migrate.")
            console.print(f"Looked for: {', '.join(config.sources)}")
        return

    results = [
        migrate_source(s, ai_path, strategy, dry_run=dry_run, backup=backup) for s in sources
    ]

    if output_format is OutputFormat.JSON:
        emit_json(
            console,
            {"dry_run": dry_run, "merge_strategy": strategy.value, "sources": results},
        )
        return

    for result in results:
        _print_result(console, result)
    if dry_run:
        console.print("Run without --dry-run to apply.")
