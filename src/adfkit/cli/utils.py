# topmark:header:start
#
#   project      : ADFKit
#   file         : utils.py
#   file_relpath : src/adfkit/cli/utils.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Helpers shared by the ADFKit CLI commands.

File access lives here (the core never touches the filesystem), together
with the translation of core exceptions into CLI errors carrying exit codes.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from adfkit.cli.errors import (
    AdfkitDataError,
    AdfkitFileNotFoundError,
    AdfkitInvalidConfigError,
    AdfkitIOError,
)
from adfkit.config import AdfkitConfig, AdfkitConfigError
from adfkit.config.logging import get_logger
from adfkit.core.errors import AdfBundleError, AdfParseError, AdfPatchError

if TYPE_CHECKING:
    from adfkit.cli.console import ConsoleLike
    from adfkit.config.logging import AdfkitLogger

logger: AdfkitLogger = get_logger(__name__)


def get_console(ctx: click.Context) -> ConsoleLike:
    """Return the console stored on the Click context by the group."""
    return ctx.obj["console"]


def get_config(ctx: click.Context) -> AdfkitConfig:
    """Return the resolved config stored on the Click context (defaults if absent)."""
    return ctx.obj.get("config") or AdfkitConfig()


def get_effective_verbosity(ctx: click.Context) -> int:
    """Return the program-output verbosity (-1 quiet, 0 normal, 1+ verbose)."""
    return int(ctx.obj.get("verbosity_level", 0))


def resolve_ai_dir(ctx: click.Context, ai_dir: str | None) -> Path:
    """Return the AI directory: the ``--ai-dir`` option, else the configured one."""
    return Path(ai_dir if ai_dir is not None else get_config(ctx).ai_dir)


def read_text(path: Path) -> str:
    """Read a UTF-8 text file, mapping failures to CLI errors.

    Raises:
        AdfkitFileNotFoundError: If the file does not exist.
        AdfkitIOError: If the file cannot be read or decoded.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise AdfkitFileNotFoundError(f"File not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise AdfkitIOError(f"Cannot read {path}: {e}") from e


def write_text(path: Path, text: str) -> None:
    """Write a UTF-8 text file with ``\\n`` newlines, mapping failures to CLI errors."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="\n")
    except OSError as e:
        raise AdfkitIOError(f"Cannot write {path}: {e}") from e
    logger.debug("Wrote %s (%d chars)", path, len(text))


def read_file_for_bundle(path: str) -> str:
    """File reader injected into the bundler.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    return Path(path).read_text(encoding="utf-8")


@contextmanager
def translate_errors() -> Iterator[None]:
    """Translate core and config exceptions into CLI errors with exit codes."""
    try:
        yield
    except AdfBundleError as e:
        if isinstance(e.__cause__, FileNotFoundError):
            raise AdfkitFileNotFoundError(str(e)) from e
        raise AdfkitIOError(str(e)) from e
    except (AdfParseError, AdfPatchError) as e:
        raise AdfkitDataError(str(e)) from e
    except AdfkitConfigError as e:
        raise AdfkitInvalidConfigError(str(e)) from e


def to_jsonable(obj: Any) -> Any:
    """Convert dataclasses (recursively) into JSON-friendly structures."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, Path):
        return obj.as_posix()
    return obj


def emit_json(console: ConsoleLike, payload: Any) -> None:
    """Print ``payload`` as indented JSON."""
    console.print(json.dumps(to_jsonable(payload), indent=2, ensure_ascii=False))


def plural(count: int, word: str) -> str:
    """Return ``"1 word"`` or ``"N words"``."""
    return f"{count} {word}{'' if count == 1 else 's'}"
