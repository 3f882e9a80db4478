# topmark:header:start
#
#   project      : ADFKit
#   file         : validator.py
#   file_relpath : src/adfkit/core/validator.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADF constraint validator.

Checks metric entries against their ceilings and produces a structured
evidence report. External measurements (e.g. line counts) can be passed as
overrides and take precedence over the values recorded in the document.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import TYPE_CHECKING

from adfkit.constants import DEFAULT_HEADROOM_PERCENT, DEFAULT_STALE_THRESHOLD
from adfkit.core.model import MetricContent, Weight, format_number

if TYPE_CHECKING:
    from adfkit.core.model import AdfDocument, Number


class ConstraintStatus(str, Enum):
    """Outcome of a single metric check."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class ValueSource(str, Enum):
    """Where the checked value came from."""

    OVERRIDE = "override"
    DOCUMENT = "document"


@dataclass(frozen=True)
class ConstraintResult:
    """Result of checking one metric entry against its ceiling."""

    section: str
    metric: str
    value: Number
    ceiling: Number
    unit: str
    status: ConstraintStatus
    message: str
    source: ValueSource


@dataclass(frozen=True)
class WeightSummary:
    """Section counts by weight tag."""

    load_bearing: int
    advisory: int
    unweighted: int
    total: int


@dataclass(frozen=True)
class EvidenceResult:
    """Evidence report for one document."""

    constraints: tuple[ConstraintResult, ...]
    weight_summary: WeightSummary
    all_passing: bool
    fail_count: int
    warn_count: int


@dataclass(frozen=True)
class StaleBaseline:
    """A metric whose measured value has drifted well past its recorded baseline."""

    metric: str
    baseline: Number
    current: Number
    delta: Number
    ratio: float
    recommended_ceiling: int


def resolve_status(value: Number, ceiling: Number) -> ConstraintStatus:
    """Map a value/ceiling pair to a status: above fails, at the ceiling warns."""
    if value > ceiling:
        return ConstraintStatus.FAIL
    if value == ceiling:
        return ConstraintStatus.WARN
    return ConstraintStatus.PASS


def recommended_ceiling(
    current: Number, headroom_percent: int = DEFAULT_HEADROOM_PERCENT
) -> int:
    """Ceiling with ``headroom_percent`` room above ``current``, rounded up.

    Exact fractions keep exact results exact, so 130 at 15% gives 150 and
    not 150.00000000000003 rounded up to 151.
    """
    return math.ceil(Fraction(str(current)) * (100 + headroom_percent) / 100)


def validate_constraints(
    doc: AdfDocument,
    overrides: Mapping[str, Number] | None = None,
) -> EvidenceResult:
    """Validate every metric constraint of a document.

    Args:
        doc (AdfDocument): Parsed (or bundled) document.
        overrides (Mapping[str, Number] | None): Optional externally measured
            values keyed by metric key; they replace the document's values.

    Returns:
        EvidenceResult: Per-constraint results plus summary counts. Warnings
            never make ``all_passing`` false.

    Raises:
        ValueError: If an override is NaN or infinite.
    """
    results: list[ConstraintResult] = []
    for section in doc.sections:
        if not isinstance(section.content, MetricContent):
            continue
        for entry in section.content.entries:
            override = overrides.get(entry.key) if overrides is not None else None
            has_override = override is not None
            if override is not None and not math.isfinite(override):
                raise ValueError(f"Override for {entry.key!r} is not finite: {override!r}")
            value: Number = override if override is not None else entry.value
            status = resolve_status(value, entry.ceiling)
            results.append(
                ConstraintResult(
                    section=section.key,
                    metric=entry.key,
                    value=value,
                    ceiling=entry.ceiling,
                    unit=entry.unit,
                    status=status,
                    message=(
                        f"{entry.key}: {format_number(value)} / {format_number(entry.ceiling)} "
                        f"[{entry.unit}] -- {status.value.upper()}"
                    ),
                    source=ValueSource.OVERRIDE if has_override else ValueSource.DOCUMENT,
                )
            )

    fail_count = sum(1 for r in results if r.status is ConstraintStatus.FAIL)
    warn_count = sum(1 for r in results if r.status is ConstraintStatus.WARN)
    return EvidenceResult(
        constraints=tuple(results),
        weight_summary=compute_weight_summary(doc),
        all_passing=fail_count == 0,
        fail_count=fail_count,
        warn_count=warn_count,
    )


def compute_weight_summary(doc: AdfDocument) -> WeightSummary:
    """Count sections by weight category."""
    load_bearing = sum(1 for s in doc.sections if s.weight is Weight.LOAD_BEARING)
    advisory = sum(1 for s in doc.sections if s.weight is Weight.ADVISORY)
    total = len(doc.sections)
    return WeightSummary(
        load_bearing=load_bearing,
        advisory=advisory,
        unweighted=total - load_bearing - advisory,
        total=total,
    )


def detect_stale_baselines(
    doc: AdfDocument,
    overrides: Mapping[str, Number] | None,
    threshold: float = DEFAULT_STALE_THRESHOLD,
) -> list[StaleBaseline]:
    """Report metrics whose measured value outgrew the recorded baseline.

    A metric is stale when ``current / baseline >= threshold``. Only entries
    with a positive baseline and a measured override are considered.

    Args:
        doc (AdfDocument): Document holding the baselines.
        overrides (Mapping[str, Number] | None): Measured values by metric key.
        threshold (float): Ratio at which a baseline counts as stale.

    Returns:
        list[StaleBaseline]: One warning per stale metric, in document order.
    """
    if not overrides:
        return []
    warnings: list[StaleBaseline] = []
    for section in doc.sections:
        if not isinstance(section.content, MetricContent):
            continue
        for entry in section.content.entries:
            if entry.value <= 0 or entry.key not in overrides:
                continue
            current = overrides[entry.key]
            ratio = current / entry.value
            if ratio < threshold:
                continue
            warnings.append(
                StaleBaseline(
                    metric=entry.key,
                    baseline=entry.value,
                    current=current,
                    delta=current - entry.value,
                    ratio=round(ratio, 2),
                    recommended_ceiling=recommended_ceiling(current),
                )
            )
    return warnings
