# topmark:header:start
#
#   project      : ADFKit
#   file         : patterns.py
#   file_relpath : src/adfkit/migrate/patterns.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pattern tables used by the markdown migration.

The tables are plain data: ordered tuples of `PatternRule`, evaluated by one
generic matcher (`first_match`). Order matters: the first rule whose pattern
matches wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PatternRule(Generic[T]):
    """A compiled pattern and the value it yields on a match."""

    pattern: re.Pattern[str]
    value: T


def rule(pattern: str, value: T, flags: int = 0) -> PatternRule[T]:
    """Compile ``pattern`` into a `PatternRule` yielding ``value``."""
    return PatternRule(pattern=re.compile(pattern, flags), value=value)


def first_match(rules: Iterable[PatternRule[T]], text: str) -> T | None:
    """Return the value of the first rule matching ``text``, or None."""
    for r in rules:
        if r.pattern.search(text):
            return r.value
    return None


def matches_any(rules: Iterable[PatternRule[T]], text: str) -> bool:
    """Return True if any rule matches ``text``."""
    return any(r.pattern.search(text) for r in rules)


# Rule strength. Imperative keywords are case-sensitive (shouting), except
# "DO NOT" which is commonly written in sentence case.
IMPERATIVE: Final = "imperative"
ADVISORY: Final = "advisory"

STRENGTH_RULES: Final[tuple[PatternRule[str], ...]] = (
    rule(r"\bNEVER\b", IMPERATIVE),
    rule(r"\bALWAYS\b", IMPERATIVE),
    rule(r"\bMUST\b", IMPERATIVE),
    rule(r"\bDO NOT\b", IMPERATIVE, re.IGNORECASE),
    rule(r"\bIMPORTANT\b", IMPERATIVE),
    rule(r"\bCRITICAL\b", IMPERATIVE),
    rule(r"\bREQUIRE[DS]?\b", IMPERATIVE),
    rule(r"\bprefer\b", ADVISORY, re.IGNORECASE),
    rule(r"\bshould\b", ADVISORY, re.IGNORECASE),
    rule(r"\bbias\b", ADVISORY, re.IGNORECASE),
    rule(r"\brecommend", ADVISORY, re.IGNORECASE),
    rule(r"\bavoid\b", ADVISORY, re.IGNORECASE),
    rule(r"\bconsider\b", ADVISORY, re.IGNORECASE),
    rule(r"\btry to\b", ADVISORY, re.IGNORECASE),
)

# Environment/runtime notes that belong in the agent's own config file.
STAY_RULES: Final[tuple[PatternRule[bool], ...]] = (
    rule(r"\bWSL\b", True, re.IGNORECASE),
    rule(r"\bline.ending", True, re.IGNORECASE),
    rule(r"\bcredential.helper", True, re.IGNORECASE),
    rule(r"/mnt/c/", True, re.IGNORECASE),
    rule(r"\bwindows\b", True, re.IGNORECASE),
    rule(r"\bmingw", True, re.IGNORECASE),
    rule(r"\bos[- ]specific\b", True, re.IGNORECASE),
    rule(r"\bshell[- ]specific\b", True, re.IGNORECASE),
)

FRONTEND_MODULE: Final[str] = "frontend.adf"
BACKEND_MODULE: Final[str] = "backend.adf"
CORE_MODULE: Final[str] = "core.adf"

MODULE_RULES: Final[tuple[PatternRule[str], ...]] = (
    rule(
        r"\b(design.system|ui|frontend|css|component|react|vue|svelte)\b",
        FRONTEND_MODULE,
        re.IGNORECASE,
    ),
    rule(r"\b(api|backend|deploy|server|database|db|endpoint)\b", BACKEND_MODULE, re.IGNORECASE),
)

# Headings that decide the weight of a neutral rule.
STYLE_HEADING: Final = "style"
WORKFLOW_HEADING: Final = "workflow"

HEADING_RULES: Final[tuple[PatternRule[str], ...]] = (
    rule(r"\b(convention|style|naming|format)\b", STYLE_HEADING, re.IGNORECASE),
    rule(r"\b(git|commit|workflow|hook)\b", WORKFLOW_HEADING, re.IGNORECASE),
)

SHELL_LANGUAGES: Final[frozenset[str]] = frozenset({"bash", "sh"})

# Connective words ignored when comparing items for duplicates. Negations and
# modal verbs are not listed.
STOP_WORDS: Final[frozenset[str]] = frozenset(
    {
        "an", "and", "are", "as", "at", "be", "by", "for", "from", "if", "in",
        "into", "is", "it", "of", "on", "or", "out", "so", "than", "that", "the",
        "then", "this", "to", "up", "when", "while", "with",
    }
)  # fmt: skip
