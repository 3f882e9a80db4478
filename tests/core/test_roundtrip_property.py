# topmark:header:start
#
#   project      : ADFKit
#   file         : test_roundtrip_property.py
#   file_relpath : tests/core/test_roundtrip_property.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

# pyright: strict

"""Property tests for the parser/formatter pair.

Asserts that:
1) formatting is idempotent through a parse (``format(parse(format(d))) == format(d)``),
2) parsing formatted output recovers the document, modulo canonical order,
   standard decorations and empty structured sections (which read back as
   empty text).
"""

from __future__ import annotations

from dataclasses import replace

from hypothesis import given, settings

from adfkit.core.formatter import format_adf, resolve_decoration, sort_sections
from adfkit.core.model import AdfDocument, AdfSection, TextContent
from adfkit.core.parser import parse_adf
from tests.strategies_adf import s_document


def _expected_section(section: AdfSection) -> AdfSection:
    content = section.content
    if isinstance(content, TextContent):
        content = TextContent(content.value.strip())
    return replace(section, content=content, decoration=resolve_decoration(section))


@settings(max_examples=200, deadline=None)
@given(doc=s_document)
def test_format_parse_format_is_stable(doc: AdfDocument) -> None:
    """Formatted text survives a parse/format cycle unchanged."""
    text = format_adf(doc)
    assert format_adf(parse_adf(text)) == text


@settings(max_examples=200, deadline=None)
@given(doc=s_document)
def test_parse_recovers_formatted_document(doc: AdfDocument) -> None:
    """Parsing formatted output yields the canonicalized input document."""
    parsed = parse_adf(format_adf(doc))
    expected = tuple(_expected_section(s) for s in sort_sections(doc.sections))
    assert parsed.sections == expected
