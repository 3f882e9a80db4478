# topmark:header:start
#
#   project      : ADFKit
#   file         : __init__.py
#   file_relpath : src/adfkit/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Subcommands of the ``adfkit`` CLI."""
