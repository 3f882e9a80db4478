# topmark:header:start
#
#   project      : ADFKit
#   file         : recalibrate.py
#   file_relpath : src/adfkit/bundle/recalibrate.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Metric recalibration: move baselines and ceilings to measured values.

For every module ``METRICS`` entry with a measurement, the baseline becomes
the measured value and the ceiling becomes ``ceil(current * (1 + headroom%))``.
Each change is recorded in a ``BUDGET_RATIONALES`` map section, one entry per
metric and day (``ENTRY_LOC_20250101: 40 -> 60, ceiling 50 -> 69; reason``).

All edits go through the patcher, so a recalibrated module always formats to
text that parses back to the same document.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Final

from adfkit.config.logging import get_logger
from adfkit.core.model import MapContent, MapEntry, MetricContent, format_number
from adfkit.core.patcher import (
    AddBullet,
    AddSection,
    PatchOperation,
    ReplaceBullet,
    ReplaceSection,
    apply_patches,
)
from adfkit.core.validator import recommended_ceiling

if TYPE_CHECKING:
    from collections.abc import Mapping

    from adfkit.bundle.manifest import Manifest
    from adfkit.core.model import AdfDocument, MetricEntry, Number

logger = get_logger(__name__)

METRICS_SECTION: Final[str] = "METRICS"
RATIONALE_SECTION: Final[str] = "BUDGET_RATIONALES"
MIN_HEADROOM_PERCENT: Final[int] = 1
MAX_HEADROOM_PERCENT: Final[int] = 200


@dataclass(frozen=True)
class MetricRecalibration:
    """One metric moved to its measured value."""

    metric: str
    module: str
    baseline: Number
    current: int
    previous_ceiling: Number
    recommended_ceiling: int

    @property
    def delta(self) -> Number:
        return self.current - self.baseline


@dataclass(frozen=True)
class ModuleRecalibration:
    """A module document with its metrics rewritten."""

    module: str
    document: AdfDocument
    updates: tuple[MetricRecalibration, ...]


def manifest_module_paths(manifest: Manifest) -> list[str]:
    """Default-load then on-demand module paths, without duplicates."""
    paths = [*manifest.default_load, *(m.path for m in manifest.on_demand)]
    return list(dict.fromkeys(paths))


def recalibrate_document(
    doc: AdfDocument,
    module: str,
    measured: Mapping[str, int],
    headroom_percent: int,
) -> tuple[AdfDocument, list[MetricRecalibration]]:
    """Rewrite the ``METRICS`` section of one module.

    Metric keys are matched case-insensitively against ``measured``.

    Returns:
        tuple[AdfDocument, list[MetricRecalibration]]: The new document (``doc``
            itself when nothing matched) and the applied changes.
    """
    section = doc.find_section(METRICS_SECTION)
    if section is None or not isinstance(section.content, MetricContent):
        return doc, []

    updates: list[MetricRecalibration] = []
    entries: list[MetricEntry] = []
    for entry in section.content.entries:
        current = measured.get(entry.key.lower())
        if current is None:
            entries.append(entry)
            continue
        ceiling = recommended_ceiling(current, headroom_percent)
        updates.append(
            MetricRecalibration(
                metric=entry.key.lower(),
                module=module,
                baseline=entry.value,
                current=current,
                previous_ceiling=entry.ceiling,
                recommended_ceiling=ceiling,
            )
        )
        entries.append(replace(entry, value=current, ceiling=ceiling))

    if not updates:
        return doc, []
    patched = apply_patches(
        doc, [ReplaceSection(key=METRICS_SECTION, content=MetricContent(tuple(entries)))]
    )
    return patched, updates


def rationale_key(metric: str, day: dt.date) -> str:
    """Map key of a rationale entry, e.g. ``ENTRY_LOC_20250101``."""
    return f"{metric.upper()}_{day:%Y%m%d}"


def rationale_ops(
    doc: AdfDocument,
    updates: list[MetricRecalibration],
    rationale: str,
    day: dt.date,
) -> list[PatchOperation]:
    """Patch operations recording ``updates`` in ``BUDGET_RATIONALES``.

    An entry for the same metric and day is overwritten. A
    ``BUDGET_RATIONALES`` section that is not a map is left alone.
    """
    values = {
        rationale_key(u.metric, day): (
            f"{format_number(u.baseline)} -> {u.current}, ceiling "
            f"{format_number(u.previous_ceiling)} -> {u.recommended_ceiling}; {rationale}"
        )
        for u in updates
    }
    section = doc.find_section(RATIONALE_SECTION)
    if section is None:
        entries = tuple(MapEntry(key=key, value=value) for key, value in values.items())
        return [AddSection(key=RATIONALE_SECTION, content=MapContent(entries))]
    if not isinstance(section.content, MapContent):
        logger.warning(
            "%s holds %s content; rationale not recorded", RATIONALE_SECTION, section.content.kind
        )
        return []

    existing = [e.key for e in section.content.entries]
    ops: list[PatchOperation] = []
    for key, value in values.items():
        if key in existing:
            ops.append(
                ReplaceBullet(
                    section=RATIONALE_SECTION, index=existing.index(key), value=f"{key}: {value}"
                )
            )
        else:
            ops.append(AddBullet(section=RATIONALE_SECTION, value=f"{key}: {value}"))
    return ops


def recalibrate_modules(
    modules: Mapping[str, AdfDocument],
    measured: Mapping[str, int],
    headroom_percent: int,
) -> list[ModuleRecalibration]:
    """Recalibrate every module that has a measured ``METRICS`` entry.

    Args:
        modules (Mapping[str, AdfDocument]): Parsed modules by path, in manifest order.
        measured (Mapping[str, int]): Line counts keyed by lower-cased metric key.
        headroom_percent (int): Ceiling headroom, 1 to 200 percent.

    Returns:
        list[ModuleRecalibration]: Only the modules that changed.

    Raises:
        ValueError: If ``headroom_percent`` is out of range.
    """
    if not MIN_HEADROOM_PERCENT <= headroom_percent <= MAX_HEADROOM_PERCENT:
        raise ValueError(
            f"Headroom must be between {MIN_HEADROOM_PERCENT} and {MAX_HEADROOM_PERCENT} percent"
        )
    results: list[ModuleRecalibration] = []
    for module, doc in modules.items():
        patched, updates = recalibrate_document(doc, module, measured, headroom_percent)
        if not updates:
            continue
        logger.info("Recalibrated %d metric(s) in %s", len(updates), module)
        results.append(ModuleRecalibration(module=module, document=patched, updates=tuple(updates)))
    return results


def record_rationale(
    result: ModuleRecalibration, rationale: str, day: dt.date
) -> ModuleRecalibration:
    """Add the ``BUDGET_RATIONALES`` entries for ``result`` to its document.

    Raises:
        AdfPatchError: If ``rationale`` spans several lines.
    """
    ops = rationale_ops(result.document, list(result.updates), rationale, day)
    return replace(result, document=apply_patches(result.document, ops))


def auto_rationale(headroom_percent: int, metric_count: int, day: dt.date) -> str:
    """Generated rationale for ``--auto-rationale``."""
    return (
        f"Recalibrated {metric_count} metric baseline(s) on {day.isoformat()} "
        f"using +{headroom_percent}% headroom from current measured LOC."
    )
