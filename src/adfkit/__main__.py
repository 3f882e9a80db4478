# topmark:header:start
#
#   project      : ADFKit
#   file         : __main__.py
#   file_relpath : src/adfkit/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Module entry point for running ADFKit via ``python -m adfkit``.

Delegates to `adfkit.cli.main.cli`, the same entry point as the ``adfkit``
console script.
"""

from __future__ import annotations

from adfkit.cli.main import cli

if __name__ == "__main__":
    cli()
