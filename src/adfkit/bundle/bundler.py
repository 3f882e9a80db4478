# topmark:header:start
#
#   project      : ADFKit
#   file         : bundler.py
#   file_relpath : src/adfkit/bundle/bundler.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Bundle resolved ADF modules into one merged document.

`bundle_modules` reads ``manifest.adf`` and each requested module through an
injected reader, so callers (and tests) decide where bytes come from. The
merge is deterministic and input-order preserving: sections appear in the
order their key was first seen.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Final

from adfkit.bundle.manifest import Manifest, parse_manifest
from adfkit.bundle.resolver import matched_keywords
from adfkit.config.logging import get_logger
from adfkit.constants import CHARS_PER_TOKEN, MANIFEST_FILENAME, SUPPORTED_ADF_VERSION
from adfkit.core.errors import AdfBundleError
from adfkit.core.model import (
    AdfDocument,
    AdfSection,
    ListContent,
    MapContent,
    MetricContent,
    TextContent,
    Weight,
    format_number,
)
from adfkit.core.parser import parse_adf

if TYPE_CHECKING:
    from adfkit.config.logging import AdfkitLogger

logger: AdfkitLogger = get_logger(__name__)

FileReader = Callable[[str], str]
"""Reader callback: takes a path and returns its text.

Raises OSError when the file cannot be read or ValueError (e.g. UnicodeDecodeError)
when it cannot be decoded.
"""

SECTION_OVERHEAD: Final[int] = 2  # ": " after the key
LIST_ITEM_OVERHEAD: Final[int] = 4
MAP_ENTRY_OVERHEAD: Final[int] = 4
METRIC_ENTRY_OVERHEAD: Final[int] = 8


class LoadReason(str, Enum):
    """Why a module ended up in the bundle."""

    DEFAULT = "default"
    TRIGGER = "trigger"


@dataclass(frozen=True)
class TriggerMatch:
    """Diagnostic row: one on-demand trigger and what it matched."""

    module: str
    trigger: str
    matched: bool
    matched_keywords: tuple[str, ...]
    load_reason: LoadReason


@dataclass(frozen=True)
class ModuleBudgetOverrun:
    """A module whose token estimate exceeds its own ``[budget: N]``."""

    module: str
    tokens: int
    budget: int


@dataclass(frozen=True)
class BundleResult:
    """Outcome of `bundle_modules`."""

    manifest: Manifest
    resolved_modules: tuple[str, ...]
    merged_document: AdfDocument
    token_estimate: int
    token_budget: int | None
    token_utilization: float | None
    per_module_tokens: dict[str, int]
    module_budget_overruns: tuple[ModuleBudgetOverrun, ...]
    trigger_matches: tuple[TriggerMatch, ...]
    unmatched_modules: tuple[str, ...]
    advisory_only_modules: tuple[str, ...]


def bundle_modules(
    base_path: str | Path,
    module_paths: Sequence[str],
    read_file: FileReader,
    keywords: Sequence[str] = (),
) -> BundleResult:
    """Load, parse and merge the given modules.

    Args:
        base_path (str | Path): Directory holding ``manifest.adf`` and the modules.
        module_paths (Sequence[str]): Module paths relative to ``base_path``,
            typically the output of `resolve_modules`.
        read_file (FileReader): Reader used for every file access.
        keywords (Sequence[str]): Task keywords, used for trigger diagnostics only.

    Returns:
        BundleResult: Merged document plus token and trigger diagnostics.

    Raises:
        AdfBundleError: If the manifest or a module cannot be read.
        AdfParseError: If a file declares an unsupported format version.
    """
    manifest = load_manifest(base_path, read_file)
    trigger_matches = _build_trigger_report(manifest, module_paths, keywords)
    default_load = set(manifest.default_load)

    documents: list[AdfDocument] = []
    per_module_tokens: dict[str, int] = {}
    advisory_only: list[str] = []
    for module_path in module_paths:
        full_path = str(Path(base_path) / module_path)
        try:
            text = read_file(full_path)
        except FileNotFoundError as exc:
            raise AdfBundleError(f"Module not found: {module_path}", module_path) from exc
        except (OSError, ValueError) as exc:
            raise AdfBundleError(f"Cannot read module: {exc}", module_path) from exc
        doc = parse_adf(text)
        logger.debug("Loaded module %s (%d sections)", module_path, len(doc))
        documents.append(doc)
        per_module_tokens[module_path] = estimate_tokens(doc)
        if module_path not in default_load and not any(
            s.weight is Weight.LOAD_BEARING for s in doc.sections
        ):
            advisory_only.append(module_path)

    merged = merge_documents(documents)
    token_estimate = estimate_tokens(merged)
    token_budget = manifest.token_budget
    utilization = token_estimate / token_budget if token_budget else None

    overruns = tuple(
        ModuleBudgetOverrun(module=m.path, tokens=per_module_tokens[m.path], budget=m.token_budget)
        for m in manifest.on_demand
        if m.token_budget is not None
        and m.path in per_module_tokens
        and per_module_tokens[m.path] > m.token_budget
    )
    for overrun in overruns:
        logger.info(
            "Module %s exceeds its budget: %d > %d tokens",
            overrun.module,
            overrun.tokens,
            overrun.budget,
        )

    return BundleResult(
        manifest=manifest,
        resolved_modules=tuple(module_paths),
        merged_document=merged,
        token_estimate=token_estimate,
        token_budget=token_budget,
        token_utilization=utilization,
        per_module_tokens=per_module_tokens,
        module_budget_overruns=overruns,
        trigger_matches=trigger_matches,
        unmatched_modules=tuple(m.path for m in manifest.on_demand if m.path not in module_paths),
        advisory_only_modules=tuple(advisory_only),
    )


def load_manifest(base_path: str | Path, read_file: FileReader) -> Manifest:
    """Read and parse ``manifest.adf`` from ``base_path``.

    Raises:
        AdfBundleError: If the manifest cannot be read.
    """
    manifest_path = str(Path(base_path) / MANIFEST_FILENAME)
    try:
        text = read_file(manifest_path)
    except FileNotFoundError as exc:
        raise AdfBundleError(
            f"{MANIFEST_FILENAME} not found in AI directory", manifest_path
        ) from exc
    except (OSError, ValueError) as exc:
        raise AdfBundleError(f"Cannot read {MANIFEST_FILENAME}: {exc}", manifest_path) from exc
    return parse_manifest(parse_adf(text))


def _build_trigger_report(
    manifest: Manifest,
    resolved: Sequence[str],
    keywords: Sequence[str],
) -> tuple[TriggerMatch, ...]:
    default_load = set(manifest.default_load)
    return tuple(
        TriggerMatch(
            module=module.path,
            trigger=trigger,
            matched=module.path in resolved,
            matched_keywords=tuple(matched_keywords(trigger, keywords)),
            load_reason=LoadReason.DEFAULT if module.path in default_load else LoadReason.TRIGGER,
        )
        for module in manifest.on_demand
        for trigger in module.triggers
    )


def merge_documents(docs: Iterable[AdfDocument]) -> AdfDocument:
    """Merge documents section by section.

    Sections sharing a key are combined with `merge_sections`, in the order
    the documents are given; the first occurrence fixes the position and
    the decoration. Duplicate keys inside a single document merge the same way.
    """
    merged: dict[str, AdfSection] = {}
    for doc in docs:
        for section in doc.sections:
            existing = merged.get(section.key)
            merged[section.key] = section if existing is None else merge_sections(existing, section)
    return AdfDocument(sections=tuple(merged.values()), version=SUPPORTED_ADF_VERSION)


def merge_sections(target: AdfSection, source: AdfSection) -> AdfSection:
    """Merge ``source`` into ``target`` and return the combined section.

    Lists, maps and metrics concatenate (target first). Texts join with a
    newline, skipping an empty side. Mismatched variants keep the target
    content unchanged: the policy is first-wins, so the result depends on
    document order.
    """
    content = target.content
    match target.content, source.content:
        case ListContent(items=a), ListContent(items=b):
            content = ListContent(items=a + b)
        case MapContent(entries=a), MapContent(entries=b):
            content = MapContent(entries=a + b)
        case MetricContent(entries=a), MetricContent(entries=b):
            content = MetricContent(entries=a + b)
        case TextContent(value=a), TextContent(value=b):
            content = TextContent(value=f"{a}\n{b}" if a and b else a or b)
        case _:
            logger.debug(
                "Keeping %s content of %s over %s (first wins)",
                target.content.kind,
                target.key,
                source.content.kind,
            )

    weight = target.weight
    if Weight.LOAD_BEARING in (target.weight, source.weight):
        weight = Weight.LOAD_BEARING
    elif source.weight is Weight.ADVISORY and target.weight is None:
        weight = Weight.ADVISORY
    return replace(target, content=content, weight=weight)


def estimate_tokens(doc: AdfDocument) -> int:
    """Rough token estimate for a document, at about four characters per token."""
    chars = 0
    for section in doc.sections:
        chars += len(section.key) + SECTION_OVERHEAD
        match section.content:
            case TextContent(value=value):
                chars += len(value)
            case ListContent(items=items):
                chars += sum(len(i) + LIST_ITEM_OVERHEAD for i in items)
            case MapContent(entries=entries):
                chars += sum(len(e.key) + len(e.value) + MAP_ENTRY_OVERHEAD for e in entries)
            case MetricContent(entries=entries):
                chars += sum(
                    len(e.key)
                    + len(format_number(e.value))
                    + len(format_number(e.ceiling))
                    + len(e.unit)
                    + METRIC_ENTRY_OVERHEAD
                    for e in entries
                )
    return math.ceil(chars / CHARS_PER_TOKEN)
