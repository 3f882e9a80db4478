# topmark:header:start
#
#   project      : ADFKit
#   file         : errors.py
#   file_relpath : src/adfkit/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Structured errors raised by the ADF core.

Usage:
    The core raises exactly one of these per failed call; no error represents
    partial success. Mapping to exit codes and console output is done by the
    CLI (see `adfkit.cli.errors`).
"""

from __future__ import annotations

from enum import Enum


class AdfError(Exception):
    """Base class for all ADF core errors."""


class AdfParseError(AdfError):
    """Raised when an ADF document declares an unsupported version.

    Attributes:
        line (int | None): 1-based line number of the offending directive.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        prefix = f"Parse error at line {line}" if line is not None else "Parse error"
        super().__init__(f"{prefix}: {message}")
        self.line = line


class PatchErrorKind(str, Enum):
    """Distinguishes the reasons a patch operation can fail."""

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    TYPE_MISMATCH = "type_mismatch"
    OUT_OF_BOUNDS = "out_of_bounds"
    METRIC_NOT_FOUND = "metric_not_found"
    INVALID_OPERATION = "invalid_operation"


class AdfPatchError(AdfError):
    """Raised when a patch operation cannot be applied; aborts the whole batch.

    Attributes:
        op_name (str): Operation tag, e.g. ``"ADD_BULLET"``.
        section (str | None): Offending section key.
        index (int | None): Offending index (bullet position, or batch position
            for malformed operations).
        kind (PatchErrorKind): Failure category.
    """

    def __init__(
        self,
        message: str,
        op_name: str,
        *,
        section: str | None = None,
        index: int | None = None,
        kind: PatchErrorKind = PatchErrorKind.INVALID_OPERATION,
    ) -> None:
        super().__init__(f"Patch error [{op_name}]: {message}")
        self.op_name = op_name
        self.section = section
        self.index = index
        self.kind = kind


class AdfBundleError(AdfError):
    """Raised when the manifest or a module cannot be read.

    Attributes:
        module_path (str | None): Path of the missing manifest or module.
    """

    def __init__(self, message: str, module_path: str | None = None) -> None:
        prefix = f"Bundle error ({module_path})" if module_path else "Bundle error"
        super().__init__(f"{prefix}: {message}")
        self.module_path = module_path
