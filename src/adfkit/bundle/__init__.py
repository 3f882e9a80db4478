# topmark:header:start
#
#   project      : ADFKit
#   file         : __init__.py
#   file_relpath : src/adfkit/bundle/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Manifest-driven module resolution, bundling and metric measurement."""

from __future__ import annotations

from adfkit.bundle.bundler import (
    BundleResult,
    LoadReason,
    ModuleBudgetOverrun,
    TriggerMatch,
    bundle_modules,
    estimate_tokens,
    load_manifest,
    merge_documents,
    merge_sections,
)
from adfkit.bundle.manifest import (
    CadenceEntry,
    Manifest,
    ManifestModule,
    MetricSource,
    SyncEntry,
    parse_manifest,
)
from adfkit.bundle.measure import Measurement, MeasurementReport, measure_metric_sources
from adfkit.bundle.recalibrate import (
    MetricRecalibration,
    ModuleRecalibration,
    auto_rationale,
    manifest_module_paths,
    recalibrate_document,
    recalibrate_modules,
    record_rationale,
)
from adfkit.bundle.resolver import extract_keywords, matches_trigger, resolve_modules

__all__ = [
    "BundleResult",
    "CadenceEntry",
    "LoadReason",
    "Manifest",
    "ManifestModule",
    "Measurement",
    "MeasurementReport",
    "MetricRecalibration",
    "MetricSource",
    "ModuleBudgetOverrun",
    "ModuleRecalibration",
    "SyncEntry",
    "TriggerMatch",
    "auto_rationale",
    "bundle_modules",
    "estimate_tokens",
    "extract_keywords",
    "load_manifest",
    "manifest_module_paths",
    "matches_trigger",
    "measure_metric_sources",
    "merge_documents",
    "merge_sections",
    "parse_manifest",
    "recalibrate_document",
    "recalibrate_modules",
    "record_rationale",
    "resolve_modules",
]
