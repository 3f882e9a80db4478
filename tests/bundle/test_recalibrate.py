# topmark:header:start
#
#   project      : ADFKit
#   file         : test_recalibrate.py
#   file_relpath : tests/bundle/test_recalibrate.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for `adfkit.bundle.recalibrate`: new ceilings and rationale entries."""

from __future__ import annotations

import datetime as dt

import pytest

from adfkit.bundle.manifest import Manifest, ManifestModule
from adfkit.bundle.recalibrate import (
    MetricRecalibration,
    auto_rationale,
    manifest_module_paths,
    rationale_key,
    recalibrate_document,
    recalibrate_modules,
    record_rationale,
)
from adfkit.core.errors import AdfPatchError, PatchErrorKind
from adfkit.core.formatter import format_adf
from adfkit.core.model import MapContent, MapEntry, MetricContent, MetricEntry
from adfkit.core.parser import parse_adf
from adfkit.core.validator import recommended_ceiling
from tests.conftest import CORE_ADF, parametrize

DAY = dt.date(2025, 3, 9)


@parametrize(
    "current, headroom, expected",
    [
        (60, 15, 69),
        (130, 15, 150),
        (100, 1, 101),
        (7, 200, 21),
        (0, 15, 0),
    ],
)
def test_recommended_ceiling(current: int, headroom: int, expected: int) -> None:
    assert recommended_ceiling(current, headroom) == expected


def test_manifest_module_paths_deduplicates() -> None:
    manifest = Manifest(
        version="0.1",
        default_load=("core.adf", "state.adf"),
        on_demand=(ManifestModule("ui.adf"), ManifestModule("core.adf")),
    )
    assert manifest_module_paths(manifest) == ["core.adf", "state.adf", "ui.adf"]


def test_recalibrate_document_matches_keys_case_insensitively() -> None:
    doc = parse_adf(
        "ADF: 0.1\n\nMETRICS:\n  Entry_LOC: 40 / 50 [lines]\n  other_loc: 5 / 10 [lines]\n"
    )

    patched, updates = recalibrate_document(doc, "core.adf", {"entry_loc": 60}, 15)

    assert updates == [
        MetricRecalibration(
            metric="entry_loc",
            module="core.adf",
            baseline=40,
            current=60,
            previous_ceiling=50,
            recommended_ceiling=69,
        )
    ]
    assert updates[0].delta == 20
    section = patched.find_section("METRICS")
    assert section is not None
    assert section.content == MetricContent(
        (
            MetricEntry("Entry_LOC", 60, 69, "lines"),
            MetricEntry("other_loc", 5, 10, "lines"),
        )
    )


def test_recalibrate_document_without_match_returns_same_document() -> None:
    doc = parse_adf(CORE_ADF)
    patched, updates = recalibrate_document(doc, "core.adf", {"gone_loc": 3}, 15)
    assert patched is doc
    assert updates == []


def test_recalibrate_modules_keeps_only_changed_modules() -> None:
    modules = {
        "core.adf": parse_adf(CORE_ADF),
        "state.adf": parse_adf("ADF: 0.1\n\nSTATE:\n  CURRENT: Sprint 3\n"),
    }

    results = recalibrate_modules(modules, {"entry_loc": 60}, 15)

    assert [r.module for r in results] == ["core.adf"]
    assert [u.recommended_ceiling for u in results[0].updates] == [69]


@parametrize("headroom", [0, 201])
def test_recalibrate_modules_rejects_headroom_out_of_range(headroom: int) -> None:
    with pytest.raises(ValueError, match="Headroom"):
        recalibrate_modules({"core.adf": parse_adf(CORE_ADF)}, {"entry_loc": 60}, headroom)


def test_record_rationale_adds_map_section() -> None:
    (result,) = recalibrate_modules({"core.adf": parse_adf(CORE_ADF)}, {"entry_loc": 60}, 15)

    recorded = record_rationale(result, "API layer split", DAY)

    section = recorded.document.find_section("BUDGET_RATIONALES")
    assert section is not None
    assert section.content == MapContent(
        (MapEntry("ENTRY_LOC_20250309", "40 -> 60, ceiling 50 -> 69; API layer split"),)
    )
    text = format_adf(recorded.document)
    assert format_adf(parse_adf(text)) == text
    assert "ENTRY_LOC_20250309: 40 -> 60, ceiling 50 -> 69; API layer split" in text


def test_record_rationale_overwrites_same_day_entry() -> None:
    doc = parse_adf(
        CORE_ADF
        + "\nBUDGET_RATIONALES:\n"
        + "  ENTRY_LOC_20250101: 30 -> 40, ceiling 40 -> 50; first pass\n"
        + "  ENTRY_LOC_20250309: 35 -> 40, ceiling 45 -> 50; stale\n"
    )
    (result,) = recalibrate_modules({"core.adf": doc}, {"entry_loc": 60}, 15)

    recorded = record_rationale(result, "second pass", DAY)

    section = recorded.document.find_section("BUDGET_RATIONALES")
    assert section is not None
    assert isinstance(section.content, MapContent)
    assert [(e.key, e.value) for e in section.content.entries] == [
        ("ENTRY_LOC_20250101", "30 -> 40, ceiling 40 -> 50; first pass"),
        ("ENTRY_LOC_20250309", "40 -> 60, ceiling 50 -> 69; second pass"),
    ]


def test_record_rationale_leaves_non_map_section_alone() -> None:
    doc = parse_adf(CORE_ADF + "\nBUDGET_RATIONALES:\n  - kept as a list\n")
    (result,) = recalibrate_modules({"core.adf": doc}, {"entry_loc": 60}, 15)

    recorded = record_rationale(result, "ignored", DAY)

    assert recorded.document.find_section("BUDGET_RATIONALES") == doc.find_section(
        "BUDGET_RATIONALES"
    )
    metrics = recorded.document.find_section("METRICS")
    assert metrics is not None
    assert isinstance(metrics.content, MetricContent)
    assert metrics.content.entries[0].ceiling == 69


def test_record_rationale_rejects_multi_line_reason() -> None:
    (result,) = recalibrate_modules({"core.adf": parse_adf(CORE_ADF)}, {"entry_loc": 60}, 15)
    with pytest.raises(AdfPatchError) as excinfo:
        record_rationale(result, "first line\nsecond line", DAY)
    assert excinfo.value.kind is PatchErrorKind.INVALID_OPERATION


def test_rationale_key_and_auto_rationale() -> None:
    assert rationale_key("entry_loc", DAY) == "ENTRY_LOC_20250309"
    assert auto_rationale(15, 2, DAY) == (
        "Recalibrated 2 metric baseline(s) on 2025-03-09 "
        "using +15% headroom from current measured LOC."
    )
