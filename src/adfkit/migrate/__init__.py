# topmark:header:start
#
#   project      : ADFKit
#   file         : __init__.py
#   file_relpath : src/adfkit/migrate/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Markdown to ADF migration: sectionizer, classifier and patch planner."""

from __future__ import annotations

from adfkit.migrate.classifier import (
    ClassificationResult,
    MigrationItem,
    MigrationPlan,
    MigrationSummary,
    RouteDecision,
    TargetSection,
    build_migration_plan,
    classify_element,
    is_duplicate_item,
)
from adfkit.migrate.markdown import (
    ElementType,
    MarkdownElement,
    MarkdownSection,
    RuleStrength,
    parse_markdown_sections,
)
from adfkit.migrate.planner import (
    MergeStrategy,
    format_migration_item,
    migrate_module,
    plan_module_patches,
    promote_section_weight,
)

__all__ = [
    "ClassificationResult",
    "ElementType",
    "MarkdownElement",
    "MarkdownSection",
    "MergeStrategy",
    "MigrationItem",
    "MigrationPlan",
    "MigrationSummary",
    "RouteDecision",
    "RuleStrength",
    "TargetSection",
    "build_migration_plan",
    "classify_element",
    "format_migration_item",
    "is_duplicate_item",
    "migrate_module",
    "parse_markdown_sections",
    "plan_module_patches",
    "promote_section_weight",
]
