# topmark:header:start
#
#   project      : ADFKit
#   file         : model.py
#   file_relpath : src/adfkit/core/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADF document model.

This module defines the immutable data types shared by the parser, formatter,
patcher, bundler, validator and migration classifier.

Sections:
    * Weight: section weight tags (load-bearing / advisory).
    * Content variants: `TextContent`, `ListContent`, `MapContent`, `MetricContent`.
    * AdfSection / AdfDocument: the document tree.

All types are frozen dataclasses backed by tuples. Changing a document always
means building a new value (see `adfkit.core.patcher`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Union

from adfkit.constants import SUPPORTED_ADF_VERSION

if TYPE_CHECKING:
    from collections.abc import Iterator


class Weight(str, Enum):
    """Weight tag distinguishing hard constraints from soft suggestions.

    An unset weight is represented by ``None`` on `AdfSection.weight`.
    """

    LOAD_BEARING = "load-bearing"
    ADVISORY = "advisory"

    @classmethod
    def from_tag(cls, tag: str | None) -> Weight | None:
        """Return the weight for a header tag, or None for unknown/empty tags."""
        if not tag:
            return None
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return None


Number = Union[int, float]


@dataclass(frozen=True)
class TextContent:
    """Free text (may span several lines)."""

    value: str = ""

    @property
    def kind(self) -> str:
        """Return the content kind label."""
        return "text"


@dataclass(frozen=True)
class ListContent:
    """Ordered bullet items."""

    items: tuple[str, ...] = ()

    @property
    def kind(self) -> str:
        """Return the content kind label."""
        return "list"


@dataclass(frozen=True)
class MapEntry:
    """A single ``KEY: value`` pair. Keys need not be unique within a section."""

    key: str
    value: str


@dataclass(frozen=True)
class MapContent:
    """Ordered key/value pairs."""

    entries: tuple[MapEntry, ...] = ()

    @property
    def kind(self) -> str:
        """Return the content kind label."""
        return "map"


@dataclass(frozen=True)
class MetricEntry:
    """A numeric measurement with its ceiling, e.g. ``entry_loc: 142 / 200 [lines]``.

    Raises:
        ValueError: If ``value`` or ``ceiling`` is not a finite number.
    """

    key: str
    value: Number
    ceiling: Number
    unit: str = ""

    def __post_init__(self) -> None:
        for name in ("value", "ceiling"):
            number = getattr(self, name)
            if isinstance(number, bool) or not isinstance(number, (int, float)):
                raise ValueError(f"Metric {self.key!r}: {name} must be a number, got {number!r}")
            if not math.isfinite(number):
                raise ValueError(f"Metric {self.key!r}: {name} must be finite, got {number!r}")


@dataclass(frozen=True)
class MetricContent:
    """Ordered metric entries."""

    entries: tuple[MetricEntry, ...] = ()

    @property
    def kind(self) -> str:
        """Return the content kind label."""
        return "metric"


AdfContent = Union[TextContent, ListContent, MapContent, MetricContent]


@dataclass(frozen=True)
class AdfSection:
    """One ``KEY:`` block of an ADF document.

    Attributes:
        key (str): Section identifier (conventionally upper case).
        content (AdfContent): One of the four content variants.
        decoration (str | None): Optional single glyph printed before the key.
        weight (Weight | None): Optional weight tag.
    """

    key: str
    content: AdfContent = field(default_factory=TextContent)
    decoration: str | None = None
    weight: Weight | None = None


@dataclass(frozen=True)
class AdfDocument:
    """Parsed in-memory representation of one ADF file."""

    sections: tuple[AdfSection, ...] = ()
    version: str = SUPPORTED_ADF_VERSION

    def __iter__(self) -> Iterator[AdfSection]:
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    def find_section(self, key: str) -> AdfSection | None:
        """Return the first section with ``key``; later duplicates are ignored."""
        return next((s for s in self.sections if s.key == key), None)

    def find_index(self, key: str) -> int:
        """Return the index of the first section with ``key``, or -1."""
        for i, section in enumerate(self.sections):
            if section.key == key:
                return i
        return -1


def split_map_value(value: str) -> MapEntry:
    """Split ``"KEY: value"`` on the first colon into a map entry.

    A value without a colon (or with a leading colon) becomes a key with an
    empty value.
    """
    colon = value.find(":")
    if colon > 0:
        return MapEntry(key=value[:colon].strip(), value=value[colon + 1 :].strip())
    return MapEntry(key=value.strip(), value="")


def format_number(number: Number) -> str:
    """Render a metric number without a trailing ``.0`` when it is integral."""
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)
