# topmark:header:start
#
#   project      : ADFKit
#   file         : planner.py
#   file_relpath : src/adfkit/migrate/planner.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Turn a `MigrationPlan` into patch batches for the target ADF modules.

MIGRATE items are grouped by target module and section. A section missing
from the module is added as a list in one ``ADD_SECTION``; an existing list
section receives one ``ADD_BULLET`` per item, subject to the merge
strategy. Items aimed at a text or map section are not merged. Sections
that receive a load-bearing item are promoted to load-bearing after the
batch has been applied.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from enum import Enum
from pathlib import PurePath
from typing import TYPE_CHECKING, Final

from adfkit.config.logging import get_logger
from adfkit.core.model import AdfDocument, ListContent, Weight
from adfkit.core.patcher import AddBullet, AddSection, PatchOperation, apply_patches
from adfkit.migrate.classifier import (
    ENVIRONMENT_REASON,
    MigrationItem,
    TargetSection,
    is_duplicate_item,
)
from adfkit.migrate.markdown import ElementType
from adfkit.migrate.patterns import SHELL_LANGUAGES

if TYPE_CHECKING:
    from adfkit.migrate.classifier import MigrationPlan

logger = get_logger(__name__)

SectionGroups = dict[TargetSection, list[MigrationItem]]

MAX_COMMAND_PREVIEW: Final[int] = 3
BACKUP_SUFFIX: Final[str] = ".pre-adf-migrate.bak"
THIN_POINTER_MARKER: Final[str] = "Do not duplicate ADF rules here"
ENVIRONMENT_HEADING: Final[str] = "## Environment"


class MergeStrategy(str, Enum):
    """How migrated items combine with sections that already exist."""

    APPEND = "append"
    DEDUPE = "dedupe"
    REPLACE = "replace"


def format_migration_item(item: MigrationItem) -> str:
    """Render a migration item as a single-line bullet value.

    Shell code blocks are summarized by their first commands, other code
    blocks by their first line. Multi-line prose is joined into one line.
    """
    element = item.element
    if element.type is ElementType.CODE_BLOCK:
        lines = [line.strip() for line in element.content.split("\n") if line.strip()]
        if element.language in SHELL_LANGUAGES:
            more = " (...)" if len(lines) > MAX_COMMAND_PREVIEW else ""
            return f"[Build commands] {'; '.join(lines[:MAX_COMMAND_PREVIEW])}{more}"
        first = lines[0] if lines else ""
        return f"[{element.language or 'code'}] {first}"
    return " ".join(line.strip() for line in element.content.split("\n") if line.strip())


def group_by_module(items: Iterable[MigrationItem]) -> dict[str, SectionGroups]:
    """Group items by target module, then by target section, keeping order."""
    groups: dict[str, SectionGroups] = {}
    for item in items:
        c = item.classification
        groups.setdefault(c.target_module, {}).setdefault(c.target_section, []).append(item)
    return groups


def _section_weight(items: Iterable[MigrationItem]) -> Weight:
    if any(i.classification.weight is Weight.LOAD_BEARING for i in items):
        return Weight.LOAD_BEARING
    return Weight.ADVISORY


def module_patches(
    doc: AdfDocument,
    groups: SectionGroups,
    strategy: MergeStrategy = MergeStrategy.DEDUPE,
) -> list[PatchOperation]:
    """Build the patch batch that merges ``groups`` into one module document.

    Args:
        doc (AdfDocument): Current module content (empty for a new module).
        groups (SectionGroups): Items to merge, by target section.
        strategy (MergeStrategy): ``dedupe`` skips items similar to an existing
            list item, ``append`` keeps everything, ``replace`` adds nothing to
            sections that already exist.

    Returns:
        list[PatchOperation]: Operations in section, then item, order.
    """
    ops: list[PatchOperation] = []
    for target, items in groups.items():
        values = [format_migration_item(i) for i in items]
        section = doc.find_section(target.value)
        if section is None:
            ops.append(
                AddSection(
                    key=target.value,
                    content=ListContent(items=tuple(values)),
                    weight=_section_weight(items),
                )
            )
            continue
        if strategy is MergeStrategy.REPLACE:
            continue
        if not isinstance(section.content, ListContent):
            logger.warning(
                "Cannot merge %d item(s) into %s: section holds %s content",
                len(values),
                target.value,
                section.content.kind,
            )
            continue
        existing = section.content.items
        for value in values:
            if strategy is MergeStrategy.DEDUPE and any(
                is_duplicate_item(e, value) for e in existing
            ):
                logger.debug("Skipping duplicate item in %s: %r", target.value, value)
                continue
            ops.append(AddBullet(section=target.value, value=value))
    return ops


def plan_module_patches(
    plan: MigrationPlan,
    modules: Mapping[str, AdfDocument],
    strategy: MergeStrategy = MergeStrategy.DEDUPE,
) -> dict[str, list[PatchOperation]]:
    """Build one patch batch per target module of ``plan``.

    Args:
        plan (MigrationPlan): The routing plan.
        modules (Mapping[str, AdfDocument]): Existing module documents by
            module path; missing modules are treated as empty.
        strategy (MergeStrategy): Merge strategy for existing sections.

    Returns:
        dict[str, list[PatchOperation]]: Patch batches keyed by module path, in
            the order modules first appear in the plan.
    """
    return {
        module: module_patches(modules.get(module, AdfDocument()), groups, strategy)
        for module, groups in group_by_module(plan.migrate_items).items()
    }


def promote_section_weight(doc: AdfDocument, key: str) -> AdfDocument:
    """Return ``doc`` with the first section named ``key`` marked load-bearing."""
    index = doc.find_index(key)
    if index < 0 or doc.sections[index].weight is Weight.LOAD_BEARING:
        return doc
    sections = list(doc.sections)
    sections[index] = replace(sections[index], weight=Weight.LOAD_BEARING)
    return replace(doc, sections=tuple(sections))


def migrate_module(
    doc: AdfDocument,
    groups: SectionGroups,
    strategy: MergeStrategy = MergeStrategy.DEDUPE,
) -> AdfDocument:
    """Apply the migration of ``groups`` to a module document.

    Raises:
        AdfPatchError: If the generated batch cannot be applied.
    """
    ops = module_patches(doc, groups, strategy)
    if ops:
        doc = apply_patches(doc, ops)
    for target, items in groups.items():
        if _section_weight(items) is Weight.LOAD_BEARING:
            doc = promote_section_weight(doc, target.value)
    return doc


def retained_items(stay_items: Iterable[MigrationItem]) -> list[MigrationItem]:
    """STAY items kept in the source file (environment notes, not duplicates)."""
    return [i for i in stay_items if i.classification.reason == ENVIRONMENT_REASON]


def render_thin_pointer(file_name: str, ai_dir: str, retained: Iterable[MigrationItem]) -> str:
    """Render the pointer text that replaces a migrated agent config file.

    Retained environment items are listed under an ``## Environment`` heading.
    """
    name = PurePath(file_name).name
    text = (
        f"# {name}\n\n"
        "> This project uses ADF for AI agent context management.\n"
        f"> All stack rules, constraints, and architectural guidance live in `{ai_dir}/`.\n"
        f"> **{THIN_POINTER_MARKER}.**\n\n"
        f"See `{ai_dir}/manifest.adf` for the module routing manifest.\n"
    )
    bullets = [f"- {format_migration_item(i)}" for i in retained]
    if bullets:
        text += f"\n{ENVIRONMENT_HEADING}\n" + "\n".join(bullets) + "\n"
    return text


def is_thin_pointer(text: str) -> bool:
    """Return True if ``text`` is already a thin pointer file."""
    return THIN_POINTER_MARKER in text
