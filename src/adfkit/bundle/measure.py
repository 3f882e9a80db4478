# topmark:header:start
#
#   project      : ADFKit
#   file         : measure.py
#   file_relpath : src/adfkit/bundle/measure.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Auto-measurement of manifest ``METRICS`` sources.

Each ``METRICS`` map entry in the manifest names a file whose line count
feeds a metric. Manifest keys are uppercase (map syntax), metric keys in
modules are lowercase, so keys are lower-cased here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from adfkit.config.logging import get_logger

if TYPE_CHECKING:
    from adfkit.bundle.manifest import Manifest

logger = get_logger(__name__)

FILE_NOT_FOUND_ERROR = "file not found"
UNREADABLE_ERROR = "unreadable"


@dataclass(frozen=True)
class Measurement:
    """Line count of one metric source (``lines`` is None when unreadable)."""

    metric: str
    path: str
    lines: int | None
    error: str | None = None


@dataclass(frozen=True)
class MeasurementReport:
    """All measurements plus the overrides mapping for the validator."""

    measurements: tuple[Measurement, ...]
    overrides: dict[str, int]


def count_lines(text: str) -> int:
    """Count lines the way the metric baselines were recorded (``split("\\n")``)."""
    return len(text.split("\n"))


def measure_metric_sources(manifest: Manifest, root: Path) -> MeasurementReport:
    """Count lines in every file named by the manifest's ``METRICS`` section.

    Args:
        manifest (Manifest): Parsed manifest.
        root (Path): Directory that relative metric paths resolve against.

    Returns:
        MeasurementReport: Measurements in manifest order. Missing or
            undecodable files are reported with an error instead of raising.
    """
    measurements: list[Measurement] = []
    overrides: dict[str, int] = {}
    for source in manifest.metrics:
        metric = source.key.lower()
        path = root / source.path
        if not path.is_file():
            logger.info("Metric source for %s not found: %s", metric, path)
            measurements.append(
                Measurement(metric=metric, path=source.path, lines=None, error=FILE_NOT_FOUND_ERROR)
            )
            continue
        try:
            lines = count_lines(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot measure %s from %s: %s", metric, path, e)
            measurements.append(
                Measurement(metric=metric, path=source.path, lines=None, error=UNREADABLE_ERROR)
            )
            continue
        logger.debug("Measured %s: %d lines (%s)", metric, lines, path)
        overrides[metric] = lines
        measurements.append(Measurement(metric=metric, path=source.path, lines=lines))
    return MeasurementReport(measurements=tuple(measurements), overrides=overrides)
