# topmark:header:start
#
#   project      : ADFKit
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the ADFKit test suite.

Sets up TRACE logging for test runs, keeps the developer's environment from
leaking into the CLI, and provides small builders for ADF documents and AI
directories shared across test packages.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import pytest

from adfkit.config import logging
from adfkit.constants import LOG_LEVEL_ENV_VAR

F = TypeVar("F", bound=Callable[..., object])

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.cli`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_cli: DecoratorType[Any] = as_typed_mark(pytest.mark.cli)


def parametrize(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.mark.parametrize`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.mark.parametrize`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.mark.parametrize`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    mark: pytest.MarkDecorator = pytest.mark.parametrize(*args, **kwargs)
    return as_typed_mark(mark)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.hookimpl`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.hookimpl`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


@pytest.fixture(autouse=True)
def silence_adfkit_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure ADFKit's runtime log level is not forced via env during tests.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Log at TRACE level for the whole test session.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


def write_files(root: Path, files: dict[str, str]) -> None:
    """Write ``{relative_path: text}`` pairs under ``root``, creating directories.

    Args:
        root (Path): Base directory.
        files (dict[str, str]): File contents keyed by relative path.
    """
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


MANIFEST_ADF = """ADF: 0.1

ROLE: Repo context router

DEFAULT_LOAD:
  - core.adf
  - state.adf

ON_DEMAND:
  - frontend.adf (Triggers on: React, CSS, UI)
  - backend.adf (Triggers on: API, Node, DB)
  - infra.adf (Triggers on: Config, Deploy) [budget: 5]

BUDGET:
  MAX_TOKENS: 4000

CADENCE:
  LINT_PASS: every commit

METRICS:
  ENTRY_LOC: src/entry.py
"""

CORE_ADF = """ADF: 0.1

CONSTRAINTS [load-bearing]:
  - No secrets in code
  - Keep PRs small

METRICS [load-bearing]:
  entry_loc: 40 / 50 [lines]
"""

STATE_ADF = """ADF: 0.1

STATE:
  CURRENT: Sprint 3
"""

FRONTEND_ADF = """ADF: 0.1

CONTEXT [advisory]:
  - Prefer functional components
"""

BACKEND_ADF = """ADF: 0.1

CONSTRAINTS [load-bearing]:
  - Validate every request body
"""


def sample_ai_files(**overrides: str) -> dict[str, str]:
    """Return the file set of a small AI directory, keyed by module path.

    Args:
        **overrides (str): Replacement text per file stem (``core``, ``manifest``, ...).

    Returns:
        dict[str, str]: File contents keyed by file name.
    """
    files = {
        "manifest": MANIFEST_ADF,
        "core": CORE_ADF,
        "state": STATE_ADF,
        "frontend": FRONTEND_ADF,
        "backend": BACKEND_ADF,
    }
    files.update(overrides)
    return {f"{stem}.adf": text for stem, text in files.items()}

