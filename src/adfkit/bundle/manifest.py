# topmark:header:start
#
#   project      : ADFKit
#   file         : manifest.py
#   file_relpath : src/adfkit/bundle/manifest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Manifest view over a parsed ``manifest.adf`` document.

The manifest routes modules: which ones are always loaded (``DEFAULT_LOAD``),
which ones load on keyword triggers (``ON_DEMAND``), and the bookkeeping
sections used by collaborators (``SYNC``, ``CADENCE``, ``METRICS``,
``BUDGET``). Malformed entries are skipped instead of failing the whole parse.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from adfkit.config.logging import get_logger
from adfkit.core.model import ListContent, MapContent, TextContent

if TYPE_CHECKING:
    from adfkit.config.logging import AdfkitLogger
    from adfkit.core.model import AdfDocument, MapEntry

logger: AdfkitLogger = get_logger(__name__)

BUDGET_SUFFIX_RE: Final[re.Pattern[str]] = re.compile(
    r"\s*\[budget\s*:\s*(\d+)\]\s*$", re.IGNORECASE
)
TRIGGER_ENTRY_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<path>.+?)\s*\(Triggers?\s+on\s*:\s*(?P<triggers>.+)\)\s*$", re.IGNORECASE
)
SYNC_ENTRY_RE: Final[re.Pattern[str]] = re.compile(r"^(?P<source>.+?)\s*->\s*(?P<target>.+)$")
ASCII_DIGITS_RE: Final[re.Pattern[str]] = re.compile(r"\d+", re.ASCII)

MAX_TOKENS_KEY: Final[str] = "MAX_TOKENS"


@dataclass(frozen=True)
class ManifestModule:
    """An on-demand module and its load triggers."""

    path: str
    triggers: tuple[str, ...] = ()
    token_budget: int | None = None


@dataclass(frozen=True)
class SyncEntry:
    """A ``source -> target`` sync pair."""

    source: str
    target: str


@dataclass(frozen=True)
class CadenceEntry:
    """How often a check should run."""

    check: str
    frequency: str


@dataclass(frozen=True)
class MetricSource:
    """File whose line count feeds a metric."""

    key: str
    path: str


@dataclass(frozen=True)
class Manifest:
    """Semantic view over ``manifest.adf``."""

    version: str
    role: str | None = None
    default_load: tuple[str, ...] = ()
    on_demand: tuple[ManifestModule, ...] = ()
    rules: tuple[str, ...] = ()
    sync: tuple[SyncEntry, ...] = ()
    cadence: tuple[CadenceEntry, ...] = ()
    metrics: tuple[MetricSource, ...] = ()
    token_budget: int | None = None


def parse_manifest(doc: AdfDocument) -> Manifest:
    """Extract a `Manifest` from a parsed ``manifest.adf`` document.

    Sections of an unexpected content type are ignored. When a key appears
    more than once, the last occurrence wins.

    Args:
        doc (AdfDocument): The parsed manifest document.

    Returns:
        Manifest: The manifest view.
    """
    role: str | None = None
    default_load: tuple[str, ...] = ()
    on_demand: tuple[ManifestModule, ...] = ()
    rules: tuple[str, ...] = ()
    sync: tuple[SyncEntry, ...] = ()
    cadence: tuple[CadenceEntry, ...] = ()
    metrics: tuple[MetricSource, ...] = ()
    token_budget: int | None = None

    for section in doc.sections:
        content = section.content
        match section.key, content:
            case "ROLE", TextContent(value=value):
                role = value
            case "DEFAULT_LOAD", ListContent(items=items):
                default_load = tuple(i.strip() for i in items if i.strip())
            case "ON_DEMAND", ListContent(items=items):
                on_demand = tuple(m for m in map(parse_trigger_entry, items) if m is not None)
            case "RULES", ListContent(items=items):
                rules = tuple(i.strip() for i in items)
            case "SYNC", ListContent(items=items):
                sync = tuple(e for e in map(parse_sync_entry, items) if e is not None)
            case "CADENCE", MapContent(entries=entries):
                cadence = tuple(CadenceEntry(check=e.key, frequency=e.value) for e in entries)
            case "METRICS", MapContent(entries=entries):
                metrics = tuple(MetricSource(key=e.key, path=e.value) for e in entries)
            case "BUDGET", MapContent(entries=entries):
                parsed_budget = _parse_budget(entries)
                if parsed_budget is not None:
                    token_budget = parsed_budget
            case _:
                logger.trace("Manifest ignores section %s (%s)", section.key, content.kind)

    return Manifest(
        version=doc.version,
        role=role,
        default_load=default_load,
        on_demand=on_demand,
        rules=rules,
        sync=sync,
        cadence=cadence,
        metrics=metrics,
        token_budget=token_budget,
    )


def _parse_budget(entries: tuple[MapEntry, ...]) -> int | None:
    for entry in entries:
        value = entry.value.strip()
        if entry.key == MAX_TOKENS_KEY:
            if ASCII_DIGITS_RE.fullmatch(value):
                return int(value)
            logger.debug("Ignoring non-numeric %s: %r", MAX_TOKENS_KEY, value)
    return None


def parse_trigger_entry(entry: str) -> ManifestModule | None:
    """Parse one ON_DEMAND entry.

    Accepted forms::

        frontend.adf (Triggers on: React, CSS, UI)
        frontend.adf (Triggers on: React, CSS, UI) [budget: 1200]
        utils.adf [budget: 500]
        utils.adf

    Returns:
        ManifestModule | None: The module, or None for an entry without a path.
    """
    remaining = entry.strip()
    token_budget: int | None = None
    budget = BUDGET_SUFFIX_RE.search(remaining)
    if budget:
        token_budget = int(budget.group(1))
        remaining = remaining[: budget.start()].strip()

    triggers: tuple[str, ...] = ()
    match = TRIGGER_ENTRY_RE.match(remaining)
    if match:
        remaining = match.group("path").strip()
        triggers = tuple(t.strip() for t in match.group("triggers").split(",") if t.strip())

    if not remaining or "(" in remaining or ")" in remaining:
        logger.debug("Skipping malformed ON_DEMAND entry: %r", entry)
        return None
    return ManifestModule(path=remaining, triggers=triggers, token_budget=token_budget)


def parse_sync_entry(entry: str) -> SyncEntry | None:
    """Parse a ``source -> target`` entry; returns None when malformed."""
    match = SYNC_ENTRY_RE.match(entry.strip())
    if not match:
        logger.debug("Skipping malformed SYNC entry: %r", entry)
        return None
    return SyncEntry(source=match.group("source").strip(), target=match.group("target").strip())
