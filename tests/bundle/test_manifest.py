# topmark:header:start
#
#   project      : ADFKit
#   file         : test_manifest.py
#   file_relpath : tests/bundle/test_manifest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for `adfkit.bundle.manifest`."""

from __future__ import annotations

from adfkit.bundle.manifest import (
    CadenceEntry,
    ManifestModule,
    MetricSource,
    SyncEntry,
    parse_manifest,
    parse_sync_entry,
    parse_trigger_entry,
)
from adfkit.core.parser import parse_adf
from tests.conftest import MANIFEST_ADF, parametrize


def test_parse_manifest_sections() -> None:
    """Every routing and bookkeeping section is extracted."""
    manifest = parse_manifest(parse_adf(MANIFEST_ADF))

    assert manifest.version == "0.1"
    assert manifest.role == "Repo context router"
    assert manifest.default_load == ("core.adf", "state.adf")
    assert manifest.on_demand == (
        ManifestModule("frontend.adf", ("React", "CSS", "UI")),
        ManifestModule("backend.adf", ("API", "Node", "DB")),
        ManifestModule("infra.adf", ("Config", "Deploy"), token_budget=5),
    )
    assert manifest.token_budget == 4000
    assert manifest.cadence == (CadenceEntry("LINT_PASS", "every commit"),)
    assert manifest.metrics == (MetricSource("ENTRY_LOC", "src/entry.py"),)


def test_parse_manifest_rules_and_sync() -> None:
    """RULES and SYNC lists are read; malformed SYNC entries are skipped."""
    manifest = parse_manifest(
        parse_adf(
            "ADF: 0.1\n"
            "RULES:\n  - Keep modules small\n"
            "SYNC:\n  - core.adf -> CLAUDE.md\n  - not a pair\n"
        )
    )
    assert manifest.rules == ("Keep modules small",)
    assert manifest.sync == (SyncEntry("core.adf", "CLAUDE.md"),)


def test_wrong_content_types_are_ignored() -> None:
    """Sections of an unexpected variant leave the defaults untouched."""
    manifest = parse_manifest(parse_adf("DEFAULT_LOAD: core.adf\nBUDGET:\n  - 100\n"))
    assert manifest.default_load == ()
    assert manifest.token_budget is None


@parametrize("raw", ["lots", "1.5", "-5", "\u00b2", "\u0663\u00b2"])
def test_non_numeric_budget_is_ignored(raw: str) -> None:
    """A MAX_TOKENS that is not a plain ASCII whole number is ignored."""
    manifest = parse_manifest(parse_adf(f"BUDGET:\n  MAX_TOKENS: {raw}\n"))
    assert manifest.token_budget is None


def test_last_occurrence_wins() -> None:
    """A key repeated in the manifest resolves to its last occurrence."""
    manifest = parse_manifest(
        parse_adf("DEFAULT_LOAD:\n  - a.adf\n\nDEFAULT_LOAD:\n  - b.adf\n")
    )
    assert manifest.default_load == ("b.adf",)


@parametrize(
    "entry, expected",
    [
        (
            "frontend.adf (Triggers on: React, CSS)",
            ManifestModule("frontend.adf", ("React", "CSS")),
        ),
        ("api.adf (Trigger on: API)", ManifestModule("api.adf", ("API",))),
        (
            "frontend.adf (Triggers on: React) [budget: 1200]",
            ManifestModule("frontend.adf", ("React",), token_budget=1200),
        ),
        ("utils.adf [budget: 500]", ManifestModule("utils.adf", token_budget=500)),
        ("  utils.adf  ", ManifestModule("utils.adf")),
        ("broken.adf (React", None),
        ("", None),
    ],
)
def test_parse_trigger_entry(entry: str, expected: ManifestModule | None) -> None:
    """ON_DEMAND entries parse with optional triggers and budget."""
    assert parse_trigger_entry(entry) == expected


def test_parse_sync_entry() -> None:
    """SYNC entries split on the arrow."""
    assert parse_sync_entry(" a.adf->b.md ") == SyncEntry("a.adf", "b.md")
    assert parse_sync_entry("a.adf") is None
