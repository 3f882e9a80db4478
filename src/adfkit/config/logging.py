# topmark:header:start
#
#   project      : ADFKit
#   file         : logging.py
#   file_relpath : src/adfkit/config/logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Logging for ADFKit: a TRACE level, the ``adfkit`` logger tree and colored output.

Every module logs through ``get_logger(__name__)``, so all records flow
through the ``adfkit`` package logger. `setup_logging` configures only that
logger (never the root logger), which keeps ADFKit well-behaved when the
engine is embedded in another application. Records go to stderr so that
JSON written to stdout by the CLI stays parseable.

The level comes from the caller or from ``ADFKIT_LOG_LEVEL``; the default is
CRITICAL, so the CLI is silent unless asked otherwise.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

from adfkit.constants import LOG_LEVEL_ENV_VAR

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

TRACE_LEVEL: Final[int] = logging.DEBUG - 5

PACKAGE_LOGGER_NAME: Final[str] = "adfkit"

LOG_FORMAT: Final[str] = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT: Final[str] = "[%(levelname)s] [%(name)s:%(lineno)d] %(message)s"

LEVEL_NAMES: Final[dict[str, int]] = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "NOTSET": logging.NOTSET,
}

_NUMERIC_LEVEL_RE: Final[re.Pattern[str]] = re.compile(r"\d+", re.ASCII)

# Highest threshold first; the first one at or below the record level wins.
LEVEL_STYLES: Final[tuple[tuple[int, Callable[..., str]], ...]] = (
    (logging.CRITICAL, chalk.red_bright),
    (logging.ERROR, chalk.red),
    (logging.WARNING, chalk.yellow),
    (logging.INFO, chalk.green),
    (logging.DEBUG, chalk.gray),
    (TRACE_LEVEL, chalk.blue),
)


class AdfkitLogger(logging.Logger):
    """Logger class with support for a TRACE log level below DEBUG.

    TRACE is used for per-line and per-element decisions (content
    classification, migration routing) that would drown DEBUG output.
    """

    def trace(
        self,
        msg: object,
        *args: object,
        extra: Mapping[str, object] | None = None,
    ) -> None:
        """Log 'msg % args' with severity 'TRACE'.

        Args:
            msg (object): The message to be logged.
            *args (object): Variable length argument list for the message.
            extra (Mapping[str, object] | None): Optional dictionary of extra information
                to pass to the logger.
        """
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(
                TRACE_LEVEL,
                msg=msg,
                args=args,
                extra=extra,
                stacklevel=2,
            )


if logging.getLevelName(TRACE_LEVEL) != "TRACE":
    logging.addLevelName(TRACE_LEVEL, "TRACE")

logging.setLoggerClass(AdfkitLogger)


class ChalkFormatter(logging.Formatter):
    """Formatter that colors log records by severity level.

    Args:
        fmt (str): The ``%``-style record format.
        enable_color (bool): When False, records are rendered without ANSI styling.
    """

    def __init__(self, fmt: str, *, enable_color: bool = True) -> None:
        super().__init__(fmt)
        self.enable_color = enable_color

    def format(self, record: logging.LogRecord) -> str:
        """Format the record and apply the style of its level band."""
        message = super().format(record)
        if not self.enable_color:
            return message
        for threshold, style in LEVEL_STYLES:
            if record.levelno >= threshold:
                return style(message)
        return chalk.dim.red(message)


def parse_log_level(value: str) -> int | None:
    """Parse a level name (``"debug"``, ``"TRACE"``) or an ASCII number (``"10"``).

    Returns:
        int | None: The numeric level, or None when ``value`` is not recognized.
    """
    v = value.strip().upper()
    if _NUMERIC_LEVEL_RE.fullmatch(v):
        return int(v)
    return LEVEL_NAMES.get(v)


def resolve_env_log_level() -> int | None:
    """Return the level requested through ``ADFKIT_LOG_LEVEL``, or None if unset or invalid."""
    val = os.environ.get(LOG_LEVEL_ENV_VAR)
    if not val:
        return None
    return parse_log_level(val)


def setup_logging(level: int | None = None, *, enable_color: bool = True) -> None:
    """Configure the ``adfkit`` logger with a level and a stderr handler.

    Calling it again replaces the handler installed by the previous call, so
    repeated CLI invocations in one process never duplicate records.

    Args:
        level (int | None): Log level. If None, ``ADFKIT_LOG_LEVEL`` is
            consulted, falling back to CRITICAL.
        enable_color (bool): Whether records are colored.
    """
    if level is None:
        level = resolve_env_log_level() or logging.CRITICAL

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(level)

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ChalkFormatter(
            LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT,
            enable_color=enable_color,
        )
    )
    package_logger.addHandler(handler)


def get_logger(name: str) -> AdfkitLogger:
    """Retrieve an AdfkitLogger instance with the specified name.

    Args:
        name (str): The name of the logger, normally ``__name__``.

    Returns:
        AdfkitLogger: The logger.
    """
    return cast("AdfkitLogger", logging.getLogger(name))
