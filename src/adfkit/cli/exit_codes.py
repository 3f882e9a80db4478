# topmark:header:start
#
#   project      : ADFKit
#   file         : exit_codes.py
#   file_relpath : src/adfkit/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exit codes for the ADFKit CLI.

ADFKit aligns with the BSD `sysexits` convention where practical, so that other
tooling can interpret failures consistently. Two low codes are deliberate
divergences: ``WOULD_CHANGE = 2`` signals that ``fmt --check`` found a file
that is not canonical, and ``POLICY_VIOLATION = 3`` signals failing metric
constraints in ``evidence --ci``. Click's own usage errors also exit with 2;
tests must assert ``result.exception`` to tell the two apart.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the ADFKit CLI.

    Attributes:
        SUCCESS: Successful execution with no errors.
        FAILURE: Generic failure. Prefer a more specific code if available.
        WOULD_CHANGE: ``fmt --check``: at least one file is not canonical.
        POLICY_VIOLATION: ``evidence --ci``: at least one constraint fails.
        USAGE_ERROR: Invalid flags or arguments. Mirrors BSD ``EX_USAGE (64)``.
        DATA_ERROR: Unparseable or unpatchable input. Mirrors BSD ``EX_DATAERR (65)``.
        FILE_NOT_FOUND: Input path does not exist. Mirrors BSD ``EX_NOINPUT (66)``.
        IO_ERROR: I/O error reading or writing a file. Mirrors BSD ``EX_IOERR (74)``.
        CONFIG_ERROR: Invalid configuration. Mirrors BSD ``EX_CONFIG (78)``.
    """

    SUCCESS = 0
    FAILURE = 1
    WOULD_CHANGE = 2  # divergence from sysexits; see module docstring
    POLICY_VIOLATION = 3

    # sysexits-aligned values
    USAGE_ERROR = 64  # EX_USAGE
    DATA_ERROR = 65  # EX_DATAERR
    FILE_NOT_FOUND = 66  # EX_NOINPUT
    IO_ERROR = 74  # EX_IOERR
    CONFIG_ERROR = 78  # EX_CONFIG
