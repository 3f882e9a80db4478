# topmark:header:start
#
#   project      : ADFKit
#   file         : patcher.py
#   file_relpath : src/adfkit/core/patcher.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADF patcher: typed delta operations over immutable documents.

A patch batch is an ordered sequence of operations applied strictly in
sequence. Application is all-or-nothing: `apply_patches` either returns a new
document with every operation applied, or raises `AdfPatchError` for the first
failing operation. The input document is never mutated; since documents are
built from tuples, each step rebuilds only the touched section and shares the
rest.

Operations:
    * `AddBullet`, `ReplaceBullet`, `RemoveBullet` (list or map sections)
    * `AddSection`, `ReplaceSection`, `RemoveSection`
    * `UpdateMetric` (metric sections)

Section lookups use the first section with a matching key.

Everything a patch writes must read back unchanged after formatting, so
section and map keys are upper-case identifiers, metric keys are
identifiers, and list items, map entries and metric units stay on one line.
Violations fail with `PatchErrorKind.INVALID_OPERATION`.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Union, cast

from adfkit.config.logging import get_logger
from adfkit.core.errors import AdfPatchError, PatchErrorKind
from adfkit.core.model import (
    AdfContent,
    AdfDocument,
    AdfSection,
    ListContent,
    MapContent,
    MapEntry,
    MetricContent,
    MetricEntry,
    Number,
    TextContent,
    Weight,
    split_map_value,
)
from adfkit.core.parser import METRIC_KEY_RE, SECTION_KEY_RE

logger = get_logger(__name__)


@dataclass(frozen=True)
class AddBullet:
    """Append an item to a list section (or a ``KEY: value`` entry to a map section)."""

    op: ClassVar[str] = "ADD_BULLET"

    section: str
    value: str


@dataclass(frozen=True)
class ReplaceBullet:
    """Overwrite the entry at ``index`` of a list or map section."""

    op: ClassVar[str] = "REPLACE_BULLET"

    section: str
    index: int
    value: str


@dataclass(frozen=True)
class RemoveBullet:
    """Remove the entry at ``index`` of a list or map section."""

    op: ClassVar[str] = "REMOVE_BULLET"

    section: str
    index: int


@dataclass(frozen=True)
class AddSection:
    """Append a new section; fails if the key already exists."""

    op: ClassVar[str] = "ADD_SECTION"

    key: str
    content: AdfContent
    decoration: str | None = None
    weight: Weight | None = None


@dataclass(frozen=True)
class ReplaceSection:
    """Replace the content (only) of an existing section."""

    op: ClassVar[str] = "REPLACE_SECTION"

    key: str
    content: AdfContent


@dataclass(frozen=True)
class RemoveSection:
    """Remove an existing section."""

    op: ClassVar[str] = "REMOVE_SECTION"

    key: str


@dataclass(frozen=True)
class UpdateMetric:
    """Overwrite the value (only) of a metric entry."""

    op: ClassVar[str] = "UPDATE_METRIC"

    section: str
    key: str
    value: Number


PatchOperation = Union[
    AddBullet,
    ReplaceBullet,
    RemoveBullet,
    AddSection,
    ReplaceSection,
    RemoveSection,
    UpdateMetric,
]


def apply_patches(doc: AdfDocument, ops: Sequence[PatchOperation]) -> AdfDocument:
    """Apply a batch of patch operations.

    Args:
        doc (AdfDocument): The document to patch. It is left untouched.
        ops (Sequence[PatchOperation]): Operations, applied in order.

    Returns:
        AdfDocument: A new document with every operation applied.

    Raises:
        AdfPatchError: For the first operation whose precondition fails; no
            partial result is returned.
    """
    result = doc
    for position, operation in enumerate(ops):
        logger.trace("Applying patch #%d: %r", position, operation)
        result = apply_patch(result, operation)
    logger.debug("Applied %d patch operation(s)", len(ops))
    return result


def apply_patch(doc: AdfDocument, operation: PatchOperation) -> AdfDocument:
    """Apply a single operation and return the new document."""
    match operation:
        case AddBullet(section=key, value=value):
            return _add_bullet(doc, key, value)
        case ReplaceBullet(section=key, index=index, value=value):
            return _replace_bullet(doc, key, index, value)
        case RemoveBullet(section=key, index=index):
            return _remove_bullet(doc, key, index)
        case AddSection():
            return _add_section(doc, operation)
        case ReplaceSection(key=key, content=content):
            idx, section = _find_section(doc, key, ReplaceSection.op)
            _check_content(ReplaceSection.op, key, content)
            return _with_section(doc, idx, replace(section, content=content))
        case RemoveSection(key=key):
            idx, _section = _find_section(doc, key, RemoveSection.op)
            return replace(doc, sections=doc.sections[:idx] + doc.sections[idx + 1 :])
        case UpdateMetric(section=key, key=metric_key, value=value):
            return _update_metric(doc, key, metric_key, value)
        case _:
            raise AdfPatchError(f"Unknown patch operation: {operation!r}", "UNKNOWN")


# --- helpers ---


def _find_section(doc: AdfDocument, key: str, op_name: str) -> tuple[int, AdfSection]:
    idx = doc.find_index(key)
    if idx < 0:
        raise AdfPatchError(
            f'Section "{key}" not found',
            op_name,
            section=key,
            kind=PatchErrorKind.NOT_FOUND,
        )
    return idx, doc.sections[idx]


def _with_section(doc: AdfDocument, idx: int, section: AdfSection) -> AdfDocument:
    return replace(doc, sections=doc.sections[:idx] + (section,) + doc.sections[idx + 1 :])


def _type_mismatch(op_name: str, section: AdfSection, expected: str) -> AdfPatchError:
    return AdfPatchError(
        f'Cannot {op_name} on {section.content.kind} section "{section.key}". '
        f"Section must be {expected}.",
        op_name,
        section=section.key,
        kind=PatchErrorKind.TYPE_MISMATCH,
    )


def _check_index(op_name: str, section: AdfSection, index: int, size: int) -> None:
    if index < 0 or index >= size:
        noun = "items" if isinstance(section.content, ListContent) else "entries"
        raise AdfPatchError(
            f'Index {index} out of bounds (section "{section.key}" has {size} {noun})',
            op_name,
            section=section.key,
            index=index,
            kind=PatchErrorKind.OUT_OF_BOUNDS,
        )


def _invalid(op_name: str, message: str, section: str) -> AdfPatchError:
    return AdfPatchError(message, op_name, section=section, kind=PatchErrorKind.INVALID_OPERATION)


def _check_section_key(op_name: str, key: str) -> None:
    if SECTION_KEY_RE.fullmatch(key) is None:
        raise _invalid(
            op_name,
            f'Invalid section key "{key}": keys must match [A-Z][A-Z0-9_]*',
            key,
        )


def _check_single_line(op_name: str, section: str, value: str, what: str) -> None:
    if "\n" in value or "\r" in value:
        raise _invalid(op_name, f'{what} in section "{section}" must be a single line', section)


def _check_map_entry(op_name: str, section: str, entry: MapEntry) -> None:
    if SECTION_KEY_RE.fullmatch(entry.key) is None:
        raise _invalid(
            op_name,
            f'Invalid map key "{entry.key}" in section "{section}": '
            "keys must match [A-Z][A-Z0-9_]*",
            section,
        )
    _check_single_line(op_name, section, entry.value, "Map value")


def _check_content(op_name: str, section: str, content: AdfContent) -> None:
    match content:
        case ListContent(items=items):
            for item in items:
                _check_single_line(op_name, section, item, "List item")
        case MapContent(entries=entries):
            for entry in entries:
                _check_map_entry(op_name, section, entry)
        case MetricContent(entries=metrics):
            for metric in metrics:
                if METRIC_KEY_RE.fullmatch(metric.key) is None:
                    raise _invalid(
                        op_name,
                        f'Invalid metric key "{metric.key}" in section "{section}"',
                        section,
                    )
                if "]" in metric.unit:
                    raise _invalid(
                        op_name, f'Metric unit "{metric.unit}" must not contain "]"', section
                    )
                _check_single_line(op_name, section, metric.unit, "Metric unit")
        case _:
            pass


def _add_bullet(doc: AdfDocument, key: str, value: str) -> AdfDocument:
    idx, section = _find_section(doc, key, AddBullet.op)
    content: AdfContent
    match section.content:
        case ListContent(items=items):
            _check_single_line(AddBullet.op, key, value, "List item")
            content = ListContent((*items, value))
        case MapContent(entries=entries):
            entry = split_map_value(value)
            _check_map_entry(AddBullet.op, key, entry)
            content = MapContent((*entries, entry))
        case _:
            raise _type_mismatch(AddBullet.op, section, "list or map")
    return _with_section(doc, idx, replace(section, content=content))


def _replace_bullet(doc: AdfDocument, key: str, index: int, value: str) -> AdfDocument:
    idx, section = _find_section(doc, key, ReplaceBullet.op)
    content: AdfContent
    match section.content:
        case ListContent(items=items):
            _check_index(ReplaceBullet.op, section, index, len(items))
            _check_single_line(ReplaceBullet.op, key, value, "List item")
            content = ListContent(items[:index] + (value,) + items[index + 1 :])
        case MapContent(entries=entries):
            _check_index(ReplaceBullet.op, section, index, len(entries))
            entry = split_map_value(value)
            _check_map_entry(ReplaceBullet.op, key, entry)
            content = MapContent(entries[:index] + (entry,) + entries[index + 1 :])
        case _:
            raise _type_mismatch(ReplaceBullet.op, section, "list or map")
    return _with_section(doc, idx, replace(section, content=content))


def _remove_bullet(doc: AdfDocument, key: str, index: int) -> AdfDocument:
    idx, section = _find_section(doc, key, RemoveBullet.op)
    content: AdfContent
    match section.content:
        case ListContent(items=items):
            _check_index(RemoveBullet.op, section, index, len(items))
            content = ListContent(items[:index] + items[index + 1 :])
        case MapContent(entries=entries):
            _check_index(RemoveBullet.op, section, index, len(entries))
            content = MapContent(entries[:index] + entries[index + 1 :])
        case _:
            raise _type_mismatch(RemoveBullet.op, section, "list or map")
    return _with_section(doc, idx, replace(section, content=content))


def _add_section(doc: AdfDocument, operation: AddSection) -> AdfDocument:
    _check_section_key(AddSection.op, operation.key)
    _check_content(AddSection.op, operation.key, operation.content)
    if doc.find_section(operation.key) is not None:
        raise AdfPatchError(
            f'Section "{operation.key}" already exists',
            AddSection.op,
            section=operation.key,
            kind=PatchErrorKind.ALREADY_EXISTS,
        )
    section = AdfSection(
        key=operation.key,
        content=operation.content,
        decoration=operation.decoration,
        weight=operation.weight,
    )
    return replace(doc, sections=(*doc.sections, section))


def _update_metric(doc: AdfDocument, key: str, metric_key: str, value: Number) -> AdfDocument:
    idx, section = _find_section(doc, key, UpdateMetric.op)
    if not isinstance(section.content, MetricContent):
        raise _type_mismatch(UpdateMetric.op, section, "metric")
    entries = section.content.entries
    position = next((i for i, e in enumerate(entries) if e.key == metric_key), -1)
    if position < 0:
        raise AdfPatchError(
            f'Metric key "{metric_key}" not found in section "{key}"',
            UpdateMetric.op,
            section=key,
            kind=PatchErrorKind.METRIC_NOT_FOUND,
        )
    try:
        updated: MetricEntry = replace(entries[position], value=value)
    except ValueError as exc:
        raise AdfPatchError(str(exc), UpdateMetric.op, section=key) from exc
    content = MetricContent(entries[:position] + (updated,) + entries[position + 1 :])
    return _with_section(doc, idx, replace(section, content=content))


# --- JSON decoding ---


def content_from_json(data: Mapping[str, Any]) -> AdfContent:
    """Decode a ``{"type": ...}`` content object.

    Raises:
        ValueError: If the object is not a valid content value.
    """
    kind = data.get("type")
    if kind == "text":
        return TextContent(str(data.get("value", "")))
    if kind == "list":
        return ListContent(tuple(str(item) for item in _as_list(data.get("items", []))))
    if kind == "map":
        return MapContent(
            tuple(
                MapEntry(key=str(e["key"]), value=str(e.get("value", "")))
                for e in _as_list(data.get("entries", []))
            )
        )
    if kind == "metric":
        return MetricContent(
            tuple(
                MetricEntry(
                    key=str(e["key"]),
                    value=_as_number(e["value"]),
                    ceiling=_as_number(e["ceiling"]),
                    unit=str(e.get("unit", "")),
                )
                for e in _as_list(data.get("entries", []))
            )
        )
    raise ValueError(f"Unknown content type: {kind!r}")


def _as_list(value: Any) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"Expected a JSON array, got {type(value).__name__}")
    return cast("list[Any]", value)


def _as_number(value: Any) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return value


def _op_from_json(data: Mapping[str, Any]) -> PatchOperation:
    op_name = data.get("op")
    if op_name == AddBullet.op:
        return AddBullet(section=str(data["section"]), value=str(data["value"]))
    if op_name == ReplaceBullet.op:
        return ReplaceBullet(
            section=str(data["section"]), index=int(data["index"]), value=str(data["value"])
        )
    if op_name == RemoveBullet.op:
        return RemoveBullet(section=str(data["section"]), index=int(data["index"]))
    if op_name == AddSection.op:
        decoration = data.get("decoration")
        weight = data.get("weight")
        return AddSection(
            key=str(data["key"]),
            content=content_from_json(data["content"]),
            decoration=str(decoration) if decoration else None,
            weight=Weight(weight) if weight else None,
        )
    if op_name == ReplaceSection.op:
        return ReplaceSection(key=str(data["key"]), content=content_from_json(data["content"]))
    if op_name == RemoveSection.op:
        return RemoveSection(key=str(data["key"]))
    if op_name == UpdateMetric.op:
        return UpdateMetric(
            section=str(data["section"]), key=str(data["key"]), value=_as_number(data["value"])
        )
    raise ValueError(f"Unknown operation {op_name!r}")


def patch_ops_from_json(data: Any) -> list[PatchOperation]:
    """Decode a JSON patch batch (an array of tagged operation objects).

    Args:
        data (Any): The decoded JSON value.

    Returns:
        list[PatchOperation]: The operations, in order.

    Raises:
        AdfPatchError: If the batch is not an array or an element is malformed.
            ``index`` holds the position of the offending element.
    """
    if not isinstance(data, list):
        raise AdfPatchError("Patch batch must be a JSON array", "BATCH")
    ops: list[PatchOperation] = []
    for position, raw in enumerate(cast("list[Any]", data)):
        if not isinstance(raw, dict):
            raise AdfPatchError("Operation must be a JSON object", "BATCH", index=position)
        item = cast("dict[str, Any]", raw)
        op_name = str(item.get("op", "UNKNOWN"))
        try:
            ops.append(_op_from_json(item))
        except KeyError as exc:
            raise AdfPatchError(
                f"Missing field {exc.args[0]!r}", op_name, index=position
            ) from exc
        except (TypeError, ValueError) as exc:
            raise AdfPatchError(str(exc), op_name, index=position) from exc
    return ops
