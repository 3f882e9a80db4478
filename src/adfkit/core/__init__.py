# topmark:header:start
#
#   project      : ADFKit
#   file         : __init__.py
#   file_relpath : src/adfkit/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADF format engine: document model, parser, formatter, patcher and validator."""

from __future__ import annotations

from adfkit.core.errors import (
    AdfBundleError,
    AdfError,
    AdfParseError,
    AdfPatchError,
    PatchErrorKind,
)
from adfkit.core.formatter import format_adf
from adfkit.core.model import (
    AdfContent,
    AdfDocument,
    AdfSection,
    ListContent,
    MapContent,
    MapEntry,
    MetricContent,
    MetricEntry,
    TextContent,
    Weight,
)
from adfkit.core.parser import parse_adf
from adfkit.core.patcher import (
    AddBullet,
    AddSection,
    PatchOperation,
    RemoveBullet,
    RemoveSection,
    ReplaceBullet,
    ReplaceSection,
    UpdateMetric,
    apply_patches,
    patch_ops_from_json,
)
from adfkit.core.validator import (
    ConstraintResult,
    ConstraintStatus,
    EvidenceResult,
    StaleBaseline,
    WeightSummary,
    compute_weight_summary,
    detect_stale_baselines,
    validate_constraints,
)

__all__ = [
    "AddBullet",
    "AddSection",
    "AdfBundleError",
    "AdfContent",
    "AdfDocument",
    "AdfError",
    "AdfParseError",
    "AdfPatchError",
    "AdfSection",
    "ConstraintResult",
    "ConstraintStatus",
    "EvidenceResult",
    "ListContent",
    "MapContent",
    "MapEntry",
    "MetricContent",
    "MetricEntry",
    "PatchErrorKind",
    "PatchOperation",
    "RemoveBullet",
    "RemoveSection",
    "ReplaceBullet",
    "ReplaceSection",
    "StaleBaseline",
    "TextContent",
    "UpdateMetric",
    "Weight",
    "WeightSummary",
    "apply_patches",
    "compute_weight_summary",
    "detect_stale_baselines",
    "format_adf",
    "parse_adf",
    "patch_ops_from_json",
    "validate_constraints",
]
