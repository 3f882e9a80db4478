# topmark:header:start
#
#   project      : ADFKit
#   file         : test_logging.py
#   file_relpath : tests/config/test_logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for `adfkit.config.logging`: level parsing, formatter and logger scope."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from adfkit.config import logging as adfkit_logging
from adfkit.constants import LOG_LEVEL_ENV_VAR
from tests.conftest import parametrize


@pytest.fixture
def restore_trace_logging() -> Iterator[None]:
    """Put the session-wide TRACE configuration back after the test."""
    yield
    adfkit_logging.setup_logging(level=adfkit_logging.TRACE_LEVEL)


@parametrize(
    "raw, expected",
    [
        ("debug", logging.DEBUG),
        (" TRACE ", adfkit_logging.TRACE_LEVEL),
        ("warn", logging.WARNING),
        ("10", 10),
        ("\u00b2", None),
        ("-10", None),
        ("loud", None),
    ],
)
def test_parse_log_level(raw: str, expected: int | None) -> None:
    assert adfkit_logging.parse_log_level(raw) == expected


def test_env_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    assert adfkit_logging.resolve_env_log_level() is None
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "info")
    assert adfkit_logging.resolve_env_log_level() == logging.INFO
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "nonsense")
    assert adfkit_logging.resolve_env_log_level() is None


def test_formatter_without_color_is_plain() -> None:
    formatter = adfkit_logging.ChalkFormatter(adfkit_logging.LOG_FORMAT, enable_color=False)
    record = logging.LogRecord("adfkit.core", logging.WARNING, __file__, 1, "careful", None, None)
    assert formatter.format(record) == "[WARNING] careful"


def test_trace_records_use_trace_name() -> None:
    formatter = adfkit_logging.ChalkFormatter(adfkit_logging.LOG_FORMAT, enable_color=True)
    record = logging.LogRecord(
        "adfkit.core", adfkit_logging.TRACE_LEVEL, __file__, 1, "detail", None, None
    )
    assert "[TRACE] detail" in formatter.format(record)


@pytest.mark.usefixtures("restore_trace_logging")
def test_setup_logging_scopes_to_package_logger(capsys: pytest.CaptureFixture[str]) -> None:
    """Only the ``adfkit`` logger is configured; repeated setup keeps one handler."""
    root_handlers = list(logging.getLogger().handlers)

    adfkit_logging.setup_logging(level=logging.INFO, enable_color=False)
    adfkit_logging.setup_logging(level=logging.INFO, enable_color=False)

    package_logger = logging.getLogger(adfkit_logging.PACKAGE_LOGGER_NAME)
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.INFO
    assert logging.getLogger().handlers == root_handlers

    adfkit_logging.get_logger("adfkit.bundle.resolver").info("resolved %d module(s)", 3)
    adfkit_logging.get_logger("adfkit.bundle.resolver").debug("hidden")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[INFO] resolved 3 module(s)" in captured.err
    assert "hidden" not in captured.err


@pytest.mark.usefixtures("restore_trace_logging")
def test_setup_logging_defaults_to_critical(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)
    adfkit_logging.setup_logging()
    assert logging.getLogger(adfkit_logging.PACKAGE_LOGGER_NAME).level == logging.CRITICAL


def test_get_logger_returns_trace_capable_logger() -> None:
    logger = adfkit_logging.get_logger("adfkit.migrate.planner")
    assert isinstance(logger, adfkit_logging.AdfkitLogger)
