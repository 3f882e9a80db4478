# topmark:header:start
#
#   project      : ADFKit
#   file         : constants.py
#   file_relpath : src/adfkit/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit Constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Final

try:
    ADFKIT_VERSION: str = get_version("adfkit")
except PackageNotFoundError:  # pragma: no cover - source checkout without install
    ADFKIT_VERSION = "0.0.0"

# The only ADF format version the parser accepts and the formatter emits.
SUPPORTED_ADF_VERSION: Final[str] = "0.1"

# Directive keywords accepted on the first line (``ADF: 0.1``).
VERSION_DIRECTIVES: Final[tuple[str, ...]] = ("ADF", "FORMAT")

MANIFEST_FILENAME: Final[str] = "manifest.adf"
DEFAULT_AI_DIR: Final[str] = ".ai"

# Config discovery
ADFKIT_TOML_NAME: Final[str] = "adfkit.toml"
PYPROJECT_TOML_NAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_SECTION: Final[str] = "adfkit"

LOG_LEVEL_ENV_VAR: Final[str] = "ADFKIT_LOG_LEVEL"

# Standard header glyphs, applied by the formatter when a section carries none.
STANDARD_DECORATIONS: Final[dict[str, str]] = {
    "TASK": "\U0001f3af",
    "ROLE": "\U0001f9d1",
    "CONTEXT": "\U0001f4cb",
    "OUTPUT": "\u2705",
    "CONSTRAINTS": "\u26a0\ufe0f",
    "RULES": "\U0001f4d0",
    "DEFAULT_LOAD": "\U0001f4e6",
    "ON_DEMAND": "\U0001f4c2",
    "FILES": "\U0001f5c2\ufe0f",
    "TOOLS": "\U0001f6e0\ufe0f",
    "RISKS": "\U0001f6a8",
    "STATE": "\U0001f9e0",
}

# Sections not listed here are emitted after these, in their original order.
CANONICAL_KEY_ORDER: Final[tuple[str, ...]] = (
    "TASK",
    "ROLE",
    "CONTEXT",
    "OUTPUT",
    "CONSTRAINTS",
    "RULES",
    "DEFAULT_LOAD",
    "ON_DEMAND",
    "BUDGET",
    "SYNC",
    "CADENCE",
    "FILES",
    "TOOLS",
    "RISKS",
    "STATE",
)

# Rough chars-per-token ratio used for bundle size estimates.
CHARS_PER_TOKEN: Final[int] = 4

# Migration merge strategies, in CLI order; "dedupe" is the default.
MERGE_STRATEGY_VALUES: Final[tuple[str, ...]] = ("append", "dedupe", "replace")
DEFAULT_MERGE_STRATEGY: Final[str] = "dedupe"

# Accepted range for the stale-baseline ratio.
MIN_STALE_THRESHOLD: Final[float] = 1.0
MAX_STALE_THRESHOLD: Final[float] = 10.0
DEFAULT_STALE_THRESHOLD: Final[float] = 1.2
DEFAULT_HEADROOM_PERCENT: Final[int] = 15
