# topmark:header:start
#
#   project      : ADFKit
#   file         : markdown.py
#   file_relpath : src/adfkit/migrate/markdown.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Markdown sectionizer for agent configuration files.

Splits a markdown document on level-2 (``## ``) headings and tags each
element of a section, in encounter order:

* ``rule``: a ``- item`` bullet, with a detected `RuleStrength`;
* ``code-block``: a fenced block, with its language tag;
* ``table-row``: a ``| ... |`` row (separator rows are skipped);
* ``prose``: consecutive other lines, accumulated into one element.

Content before the first heading becomes a preamble section with heading
``""``, kept only when it has elements. A level-1 title at the very top is
skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from adfkit.config.logging import get_logger
from adfkit.migrate.patterns import ADVISORY, IMPERATIVE, STRENGTH_RULES, first_match

logger = get_logger(__name__)

FENCE_RE: Final[re.Pattern[str]] = re.compile(r"^```(\w*)$")
RULE_RE: Final[re.Pattern[str]] = re.compile(r"^\s*-\s+(.*)$")
TABLE_ROW_RE: Final[re.Pattern[str]] = re.compile(r"^\s*\|.*\|")
TABLE_SEPARATOR_RE: Final[re.Pattern[str]] = re.compile(r"^\s*\|[\s\-:|]+\|$")
H2_PREFIX: Final[str] = "## "
H1_PREFIX: Final[str] = "# "


class RuleStrength(str, Enum):
    """How strongly a rule bullet is phrased."""

    IMPERATIVE = IMPERATIVE
    ADVISORY = ADVISORY
    NEUTRAL = "neutral"


class ElementType(str, Enum):
    """Kind of markdown element."""

    RULE = "rule"
    CODE_BLOCK = "code-block"
    TABLE_ROW = "table-row"
    PROSE = "prose"


@dataclass
class MarkdownElement:
    """One element of a markdown section."""

    type: ElementType
    content: str
    strength: RuleStrength | None = None
    language: str | None = None


@dataclass
class MarkdownSection:
    """A level-2 section and its elements."""

    heading: str
    elements: list[MarkdownElement] = field(default_factory=list)


def detect_strength(text: str) -> RuleStrength:
    """Classify a rule's phrasing as imperative, advisory or neutral."""
    found = first_match(STRENGTH_RULES, text)
    return RuleStrength(found) if found is not None else RuleStrength.NEUTRAL


class _Sectionizer:
    """Line-by-line state machine behind `parse_markdown_sections`."""

    def __init__(self) -> None:
        self.sections: list[MarkdownSection] = []
        self.current = MarkdownSection(heading="")
        self.in_code_block = False
        self.code_language = ""
        self.code_lines: list[str] = []

    def flush_code_block(self) -> None:
        if self.code_lines:
            self.current.elements.append(
                MarkdownElement(
                    type=ElementType.CODE_BLOCK,
                    content="\n".join(self.code_lines),
                    language=self.code_language,
                )
            )
        self.code_lines = []
        self.code_language = ""
        self.in_code_block = False

    def flush_section(self) -> None:
        if self.in_code_block:
            logger.debug("Unterminated code fence in section %r", self.current.heading)
            self.flush_code_block()
        if self.current.elements or self.current.heading:
            self.sections.append(self.current)

    def feed(self, line: str) -> None:
        fence = FENCE_RE.match(line)
        if fence:
            if self.in_code_block:
                self.flush_code_block()
            else:
                self.in_code_block = True
                self.code_language = fence.group(1)
                self.code_lines = []
            return
        if self.in_code_block:
            self.code_lines.append(line)
            return

        if line.startswith(H2_PREFIX):
            self.flush_section()
            self.current = MarkdownSection(heading=line[len(H2_PREFIX) :].strip())
            return
        if line.startswith(H1_PREFIX) and not self.current.heading and not self.current.elements:
            return

        elements = self.current.elements
        rule_match = RULE_RE.match(line)
        if rule_match:
            text = rule_match.group(1)
            elements.append(
                MarkdownElement(type=ElementType.RULE, content=text, strength=detect_strength(text))
            )
        elif TABLE_ROW_RE.match(line):
            if not TABLE_SEPARATOR_RE.match(line):
                elements.append(MarkdownElement(type=ElementType.TABLE_ROW, content=line.strip()))
        elif not line.strip():
            return
        elif elements and elements[-1].type is ElementType.PROSE:
            elements[-1].content += "\n" + line
        else:
            elements.append(MarkdownElement(type=ElementType.PROSE, content=line))


def parse_markdown_sections(text: str) -> list[MarkdownSection]:
    """Split markdown text into sections of tagged elements.

    Args:
        text (str): Markdown source.

    Returns:
        list[MarkdownSection]: Sections in document order.
    """
    sectionizer = _Sectionizer()
    for line in text.replace("\r\n", "\n").split("\n"):
        sectionizer.feed(line)
    sectionizer.flush_section()
    return sectionizer.sections
