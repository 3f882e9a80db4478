# topmark:header:start
#
#   project      : ADFKit
#   file         : classifier.py
#   file_relpath : src/adfkit/migrate/classifier.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Routing of markdown elements into ADF sections.

Each element is either kept in the source file (``STAY``) or moved into an
ADF module (``MIGRATE``) under one of three target sections. Classification
is deterministic: pattern tables from `adfkit.migrate.patterns` decide the
target module, the STAY cases and the weight of neutral rules.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Final

from adfkit.config.logging import get_logger
from adfkit.core.model import ListContent, TextContent, Weight
from adfkit.migrate.markdown import ElementType, RuleStrength
from adfkit.migrate.patterns import (
    CORE_MODULE,
    HEADING_RULES,
    MODULE_RULES,
    SHELL_LANGUAGES,
    STAY_RULES,
    STOP_WORDS,
    STYLE_HEADING,
    WORKFLOW_HEADING,
    first_match,
    matches_any,
)

if TYPE_CHECKING:
    from adfkit.core.model import AdfDocument
    from adfkit.migrate.markdown import MarkdownElement, MarkdownSection

logger = get_logger(__name__)

DUPLICATE_THRESHOLD: Final[float] = 0.8
DUPLICATE_REASON: Final[str] = "Already present in existing ADF (deduplicated)"
ENVIRONMENT_REASON: Final[str] = "Environment/runtime-specific (stays in source file)"

_NON_WORD_RE: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9\s]")


class RouteDecision(str, Enum):
    """Whether an element moves into ADF or stays in the source file."""

    STAY = "STAY"
    MIGRATE = "MIGRATE"


class TargetSection(str, Enum):
    """ADF section an element is routed to."""

    CONSTRAINTS = "CONSTRAINTS"
    CONTEXT = "CONTEXT"
    ADVISORY = "ADVISORY"


@dataclass(frozen=True)
class ClassificationResult:
    """Routing decision for one element."""

    decision: RouteDecision
    target_section: TargetSection
    target_module: str
    weight: Weight
    reason: str


@dataclass(frozen=True)
class MigrationItem:
    """An element, the heading it came from, and its classification."""

    element: MarkdownElement
    source_heading: str
    classification: ClassificationResult


@dataclass(frozen=True)
class MigrationSummary:
    """Counts per target section (MIGRATE items only) plus STAY and total."""

    constraints: int
    context: int
    advisory: int
    stay: int
    total: int


@dataclass(frozen=True)
class MigrationPlan:
    """Full routing plan for a markdown source."""

    items: tuple[MigrationItem, ...]
    stay_items: tuple[MigrationItem, ...]
    migrate_items: tuple[MigrationItem, ...]
    target_modules: tuple[str, ...]
    summary: MigrationSummary


def heading_to_module(heading: str) -> str:
    """Map a section heading to the ADF module its content belongs in."""
    return first_match(MODULE_RULES, heading) or CORE_MODULE


def classify_element(element: MarkdownElement, heading: str) -> ClassificationResult:
    """Classify one markdown element under its enclosing heading.

    Args:
        element (MarkdownElement): The element to route.
        heading (str): Heading of the section holding the element.

    Returns:
        ClassificationResult: The routing decision. Prose is never dropped: it
            always migrates into CONTEXT.
    """
    module = heading_to_module(heading)

    def migrate(section: TargetSection, weight: Weight, reason: str) -> ClassificationResult:
        return ClassificationResult(RouteDecision.MIGRATE, section, module, weight, reason)

    if matches_any(STAY_RULES, element.content):
        return ClassificationResult(
            RouteDecision.STAY,
            TargetSection.CONTEXT,
            module,
            Weight.ADVISORY,
            ENVIRONMENT_REASON,
        )

    match element.type:
        case ElementType.RULE:
            return migrate(*_classify_rule(element.strength, heading))
        case ElementType.CODE_BLOCK:
            reason = (
                "Build/tool commands" if element.language in SHELL_LANGUAGES else "Code reference"
            )
            return migrate(TargetSection.CONTEXT, Weight.ADVISORY, reason)
        case ElementType.TABLE_ROW:
            return migrate(TargetSection.CONTEXT, Weight.ADVISORY, "Tabular reference data")
        case _:
            return migrate(TargetSection.CONTEXT, Weight.ADVISORY, "Informational context")


def _classify_rule(
    strength: RuleStrength | None, heading: str
) -> tuple[TargetSection, Weight, str]:
    if strength is RuleStrength.IMPERATIVE:
        return TargetSection.CONSTRAINTS, Weight.LOAD_BEARING, "Imperative rule (NEVER/ALWAYS/MUST)"
    if strength is RuleStrength.ADVISORY:
        return TargetSection.ADVISORY, Weight.ADVISORY, "Advisory rule (prefer/should/avoid)"
    topic = first_match(HEADING_RULES, heading)
    if topic == STYLE_HEADING:
        return TargetSection.CONSTRAINTS, Weight.ADVISORY, "Naming/style convention"
    if topic == WORKFLOW_HEADING:
        return TargetSection.CONSTRAINTS, Weight.LOAD_BEARING, "Git workflow rule"
    return TargetSection.CONSTRAINTS, Weight.ADVISORY, "Rule (neutral strength)"


def tokenize(text: str) -> set[str]:
    """Lower-cased alphanumeric words longer than one character, minus stop words."""
    words = _NON_WORD_RE.sub(" ", text.lower()).split()
    return {w for w in words if len(w) > 1 and w not in STOP_WORDS}


def is_duplicate_item(existing: str, candidate: str) -> bool:
    """Return True when two items share at least 80% of their words (Jaccard).

    Two empty word sets count as duplicates; an empty set never matches a
    non-empty one.
    """
    a = tokenize(existing)
    b = tokenize(candidate)
    if not a and not b:
        return True
    if not a or not b:
        return False
    return len(a & b) / len(a | b) >= DUPLICATE_THRESHOLD


def existing_items(doc: AdfDocument) -> list[str]:
    """Collect the list items and text values of a document, for deduplication."""
    items: list[str] = []
    for section in doc.sections:
        match section.content:
            case ListContent(items=values):
                items.extend(values)
            case TextContent(value=value):
                items.append(value)
            case _:
                pass
    return items


def build_migration_plan(
    sections: Iterable[MarkdownSection],
    existing: AdfDocument | None = None,
) -> MigrationPlan:
    """Classify every element of the given sections into a `MigrationPlan`.

    Args:
        sections (Iterable[MarkdownSection]): Output of `parse_markdown_sections`.
        existing (AdfDocument | None): Target document; MIGRATE candidates
            already present in it are downgraded to STAY.

    Returns:
        MigrationPlan: Items in encounter order with summary counts.
    """
    known = existing_items(existing) if existing is not None else []
    items: list[MigrationItem] = []
    for section in sections:
        for element in section.elements:
            result = classify_element(element, section.heading)
            if result.decision is RouteDecision.MIGRATE and any(
                is_duplicate_item(k, element.content) for k in known
            ):
                logger.debug("Deduplicated %r", element.content)
                result = replace(result, decision=RouteDecision.STAY, reason=DUPLICATE_REASON)
            items.append(MigrationItem(element, section.heading, result))

    stay = tuple(i for i in items if i.classification.decision is RouteDecision.STAY)
    migrate = tuple(i for i in items if i.classification.decision is RouteDecision.MIGRATE)

    def count(target: TargetSection) -> int:
        return sum(1 for i in migrate if i.classification.target_section is target)

    return MigrationPlan(
        items=tuple(items),
        stay_items=stay,
        migrate_items=migrate,
        target_modules=tuple(dict.fromkeys(i.classification.target_module for i in migrate)),
        summary=MigrationSummary(
            constraints=count(TargetSection.CONSTRAINTS),
            context=count(TargetSection.CONTEXT),
            advisory=count(TargetSection.ADVISORY),
            stay=len(stay),
            total=len(items),
        ),
    )
