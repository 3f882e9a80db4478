# topmark:header:start
#
#   project      : ADFKit
#   file         : io.py
#   file_relpath : src/adfkit/config/io.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""TOML I/O helpers for the ADFKit configuration layer.

Parsing is done with `tomlkit` and returned as plain `dict` structures. The
getters validate shapes and raise `AdfkitConfigError` with the TOML location
(e.g. ``[migrate].backup``) when a value has the wrong type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeGuard, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from adfkit.config.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from adfkit.config.logging import AdfkitLogger

logger: AdfkitLogger = get_logger(__name__)

TomlTable = dict[str, Any]


class AdfkitConfigError(ValueError):
    """Raised when a configuration value is invalid."""


def is_toml_table(obj: object) -> TypeGuard[TomlTable]:
    """Type guard for a TOML table-like mapping."""
    return isinstance(obj, dict)


def load_toml_dict(path: Path) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path (Path): Path to a TOML document (``adfkit.toml`` or ``pyproject.toml``).

    Returns:
        TomlTable: The parsed TOML content.

    Notes:
        - Errors are logged and an empty dict is returned on failure.
        - Encoding is assumed to be UTF-8.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
        data_any: Any = doc.unwrap()
        return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Error loading TOML from %s: %s", path, e)
        return {}
    except TomlkitParseError as e:
        logger.error("Error decoding TOML from %s: %s", path, e)
        return {}


def get_table_value(table: TomlTable, key: str) -> TomlTable:
    """Extract a sub-table, or an empty dict when missing or not a mapping."""
    value: Any | None = table.get(key)
    return value if is_toml_table(value) else {}


def _type_error(where: str, key: str, expected: str, value: object) -> AdfkitConfigError:
    return AdfkitConfigError(
        f"Expected {expected} in {where}.{key}, got {type(value).__name__}: {value!r}"
    )


def get_string_or_none(table: TomlTable, key: str, *, where: str) -> str | None:
    """Return an optional string value; raise when present but not a `str`."""
    value: Any | None = table.get(key)
    if value is None or isinstance(value, str):
        return value
    raise _type_error(where, key, "string", value)


def get_bool_or_none(table: TomlTable, key: str, *, where: str) -> bool | None:
    """Return an optional boolean value; raise when present but not a `bool`."""
    value: Any | None = table.get(key)
    if value is None or isinstance(value, bool):
        return value
    raise _type_error(where, key, "bool", value)


def get_float_or_none(table: TomlTable, key: str, *, where: str) -> float | None:
    """Return an optional number as `float`; ``bool`` is rejected."""
    value: Any | None = table.get(key)
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise _type_error(where, key, "number", value)


def get_string_list_or_none(table: TomlTable, key: str, *, where: str) -> list[str] | None:
    """Return an optional list of strings; raise on a non-list or a non-string entry."""
    value: Any | None = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise _type_error(where, key, "list", value)
    items = cast("list[Any]", value)
    for item in items:
        if not isinstance(item, str):
            raise _type_error(where, key, "list of strings", item)
    return cast("list[str]", items)
