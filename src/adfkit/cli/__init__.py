# topmark:header:start
#
#   project      : ADFKit
#   file         : __init__.py
#   file_relpath : src/adfkit/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit CLI package.

The console script entry point is defined in ``pyproject.toml`` as::

    [project.scripts]
    adfkit = "adfkit.cli.main:cli"

All subcommands live in `adfkit.cli.commands`.
"""

from __future__ import annotations

__all__: list[str] = []
# Do NOT import .main or commands at module import time
