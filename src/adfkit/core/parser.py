# topmark:header:start
#
#   project      : ADFKit
#   file         : parser.py
#   file_relpath : src/adfkit/core/parser.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tolerant ADF parser (text → `AdfDocument`).

The parser is built for messy, often LLM-generated input: missing version
lines, inconsistent decorations and mixed content shapes degrade into
best-effort content instead of failing. The only hard failure is an
unsupported version directive on the first line.

Grammar (one section)::

    [<glyph> ]KEY[ [load-bearing|advisory]]: [inline value]
      indented body line
      ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from adfkit.config.logging import get_logger
from adfkit.constants import SUPPORTED_ADF_VERSION, VERSION_DIRECTIVES
from adfkit.core.errors import AdfParseError
from adfkit.core.model import (
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

if TYPE_CHECKING:
    from adfkit.config.logging import AdfkitLogger
    from adfkit.core.model import AdfContent, Number

logger: AdfkitLogger = get_logger(__name__)

# A decoration is one non-ASCII, non-word, non-space glyph plus an optional
# emoji variation selector (U+FE0F).
SECTION_HEADER_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?:(?P<decoration>[^\w\s\x00-\x7f]\ufe0f?)\s+)?"
    r"(?P<key>[A-Z][A-Z0-9_]*)"
    r"(?:\s*\[(?P<weight>load-bearing|advisory)\])?"
    r"\s*:\s*(?P<inline>.*)$"
)
VERSION_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<directive>" + "|".join(VERSION_DIRECTIVES) + r")\s*:\s*(?P<version>.+)$",
    re.IGNORECASE,
)
LIST_ITEM_RE: Final[re.Pattern[str]] = re.compile(r"^\s*-(?:\s+(?P<item>.*))?$")
_NUMBER: Final[str] = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)"
METRIC_ENTRY_RE: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*:\s*"
    rf"(?P<value>{_NUMBER})\s*/\s*(?P<ceiling>{_NUMBER})\s*"
    r"\[(?P<unit>[^\]]*)\]\s*$"
)
MAP_ENTRY_RE: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?P<key>[A-Z][A-Z0-9_]*)\s*:\s*(?P<value>.*)$"
)
SECTION_KEY_RE: Final[re.Pattern[str]] = re.compile(r"[A-Z][A-Z0-9_]*")
METRIC_KEY_RE: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass
class _RawSection:
    """Header fields plus the unclassified body lines of one section."""

    key: str
    decoration: str | None
    weight: Weight | None
    inline_value: str
    line_number: int
    body_lines: list[str] = field(default_factory=lambda: [])


def parse_adf(text: str) -> AdfDocument:
    """Parse ADF text into a document.

    Args:
        text (str): Raw ADF text. Any line ending convention is accepted.

    Returns:
        AdfDocument: The parsed document. Section order follows the input.

    Raises:
        AdfParseError: If the first line declares a version other than ``0.1``.
    """
    lines: list[str] = _normalize_input(text)

    start = 0
    if lines:
        match = VERSION_RE.match(lines[0])
        if match:
            raw_version = match.group("version").strip()
            if raw_version != SUPPORTED_ADF_VERSION:
                raise AdfParseError(f"Unsupported ADF version: {raw_version}", line=1)
            start = 1

    raw_sections: list[_RawSection] = _split_sections(lines, start)
    sections = tuple(_build_section(raw) for raw in raw_sections)
    logger.debug("Parsed %d section(s)", len(sections))
    return AdfDocument(sections=sections, version=SUPPORTED_ADF_VERSION)


def _normalize_input(text: str) -> list[str]:
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [line.rstrip() for line in normalized.split("\n")]


def _next_non_blank(lines: list[str], start: int) -> str | None:
    for line in lines[start:]:
        if line.strip():
            return line
    return None


def _split_sections(lines: list[str], start: int) -> list[_RawSection]:
    """Group lines into raw sections, resolving blank lines by look-ahead."""
    raw_sections: list[_RawSection] = []
    current: _RawSection | None = None

    for i in range(start, len(lines)):
        line = lines[i]
        is_blank = line.strip() == ""

        if current is None and is_blank:
            continue

        header = SECTION_HEADER_RE.match(line)
        if header:
            if current is not None:
                raw_sections.append(current)
            current = _RawSection(
                key=header.group("key"),
                decoration=header.group("decoration"),
                weight=Weight.from_tag(header.group("weight")),
                inline_value=header.group("inline").strip(),
                line_number=i + 1,
            )
            continue

        if current is None:
            logger.debug("Skipping line %d outside of any section: %r", i + 1, line)
            continue

        if not is_blank:
            current.body_lines.append(line)
            continue

        # Blank line inside a section: peek ahead to decide.
        upcoming = _next_non_blank(lines, i + 1)
        if upcoming is None or SECTION_HEADER_RE.match(upcoming):
            raw_sections.append(current)
            current = None
        else:
            current.body_lines.append("")

    if current is not None:
        raw_sections.append(current)
    return raw_sections


def _build_section(raw: _RawSection) -> AdfSection:
    content = classify_content(raw.inline_value, raw.body_lines)
    logger.trace("Section %s (line %d) classified as %s", raw.key, raw.line_number, content.kind)
    if raw.inline_value and not isinstance(content, TextContent):
        logger.warning(
            "Line %d: inline value %r of section %s is not kept in its %s body",
            raw.line_number,
            raw.inline_value,
            raw.key,
            content.kind,
        )
    return AdfSection(
        key=raw.key,
        content=content,
        decoration=raw.decoration,
        weight=raw.weight,
    )


def dedent_line(line: str) -> str:
    """Remove at most one indentation unit (two spaces or one tab)."""
    if line.startswith("  "):
        return line[2:]
    if line.startswith("\t"):
        return line[1:]
    return line


def _trim_blank_edges(lines: list[str]) -> list[str]:
    begin, end = 0, len(lines)
    while begin < end and not lines[begin].strip():
        begin += 1
    while end > begin and not lines[end - 1].strip():
        end -= 1
    return lines[begin:end]


def _parse_number(raw: str) -> Number:
    number = float(raw)
    if number.is_integer() and "." not in raw:
        return int(raw)
    return number


def classify_content(inline_value: str, body_lines: list[str]) -> AdfContent:
    """Infer the content variant of a section body.

    Priority: inline-only text, empty text, list, metric, map, fallback text.
    Classification is total: every input yields exactly one variant.

    Args:
        inline_value (str): Remainder of the header line after the colon.
        body_lines (list[str]): Raw (still indented) body lines.

    Returns:
        AdfContent: The classified content.
    """
    body = _trim_blank_edges(body_lines)

    if not body:
        return TextContent(inline_value)

    dedented = [dedent_line(line) for line in body]
    non_blank = [line for line in dedented if line.strip()]

    if all(LIST_ITEM_RE.match(line) for line in non_blank):
        items: list[str] = []
        for line in non_blank:
            m = LIST_ITEM_RE.match(line)
            if m:
                items.append((m.group("item") or "").strip())
        return ListContent(tuple(items))

    metric_matches = [METRIC_ENTRY_RE.match(line) for line in non_blank]
    if all(metric_matches):
        return MetricContent(
            tuple(
                MetricEntry(
                    key=m.group("key"),
                    value=_parse_number(m.group("value")),
                    ceiling=_parse_number(m.group("ceiling")),
                    unit=m.group("unit").strip(),
                )
                for m in metric_matches
                if m is not None
            )
        )

    map_matches = [MAP_ENTRY_RE.match(line) for line in non_blank]
    if all(map_matches):
        return MapContent(
            tuple(
                MapEntry(key=m.group("key"), value=m.group("value").strip())
                for m in map_matches
                if m is not None
            )
        )

    parts: list[str] = []
    if inline_value:
        parts.append(inline_value)
    parts.append("\n".join(dedented))
    return TextContent("\n".join(parts).strip())
