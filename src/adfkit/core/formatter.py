# topmark:header:start
#
#   project      : ADFKit
#   file         : formatter.py
#   file_relpath : src/adfkit/core/formatter.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Canonical ADF formatter (`AdfDocument` → text).

Emission is strict: sections are sorted by the canonical key order, standard
decorations are injected where a section has none, bodies use a two-space
indent, sections are separated by one blank line and the output ends with a
single newline.

Formatting is pure, total and idempotent: ``format_adf(parse_adf(t)) == t``
for any ``t`` produced by this module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adfkit.constants import CANONICAL_KEY_ORDER, STANDARD_DECORATIONS
from adfkit.core.model import (
    ListContent,
    MapContent,
    MetricContent,
    TextContent,
    format_number,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from adfkit.core.model import AdfContent, AdfDocument, AdfSection

INDENT: str = "  "

_ORDER: dict[str, int] = {key: idx for idx, key in enumerate(CANONICAL_KEY_ORDER)}


def format_adf(doc: AdfDocument) -> str:
    """Render a document as canonical ADF text.

    Args:
        doc (AdfDocument): The document to render.

    Returns:
        str: Canonical text, always terminated by a newline.
    """
    lines: list[str] = [f"ADF: {doc.version}"]
    for section in sort_sections(doc.sections):
        lines.append("")
        lines.append(format_header(section))
        lines.extend(format_body(section.content))
    return "\n".join(lines) + "\n"


def sort_sections(sections: Iterable[AdfSection]) -> list[AdfSection]:
    """Return sections in canonical order (stable; unknown keys keep their order)."""
    canonical: list[AdfSection] = []
    others: list[AdfSection] = []
    for section in sections:
        (canonical if section.key in _ORDER else others).append(section)
    canonical.sort(key=lambda s: _ORDER[s.key])
    return canonical + others


def resolve_decoration(section: AdfSection) -> str | None:
    """Return the explicit decoration, else the standard one for the key, else None."""
    return section.decoration or STANDARD_DECORATIONS.get(section.key)


def format_header(section: AdfSection) -> str:
    """Render the header line, inlining single-line non-empty text."""
    decoration = resolve_decoration(section)
    prefix = f"{decoration} {section.key}" if decoration else section.key
    if section.weight is not None:
        prefix = f"{prefix} [{section.weight.value}]"
    content = section.content
    if isinstance(content, TextContent) and content.value and "\n" not in content.value:
        return f"{prefix}: {content.value}"
    return f"{prefix}:"


def format_body(content: AdfContent) -> list[str]:
    """Render the indented body lines for a content value."""
    match content:
        case TextContent(value=value):
            if "\n" not in value:
                return []
            return [f"{INDENT}{line}" if line else "" for line in value.split("\n")]
        case ListContent(items=items):
            return [f"{INDENT}- {item}".rstrip() for item in items]
        case MapContent(entries=entries):
            return [f"{INDENT}{entry.key}: {entry.value}".rstrip() for entry in entries]
        case MetricContent(entries=metrics):
            return [
                f"{INDENT}{m.key}: {format_number(m.value)} / {format_number(m.ceiling)} [{m.unit}]"
                for m in metrics
            ]
        case _:
            raise TypeError(f"Unsupported ADF content: {content!r}")
