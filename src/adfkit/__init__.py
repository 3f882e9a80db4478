# topmark:header:start
#
#   project      : ADFKit
#   file         : __init__.py
#   file_relpath : src/adfkit/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ADFKit package.

ADFKit reads, writes and edits ADF (Attention-Directed Format) context
modules for AI coding agents. It bundles the modules a task needs,
validates metric constraints and migrates markdown agent config files into
ADF. The core API is pure and synchronous; the ``adfkit`` CLI wraps it.
"""

from __future__ import annotations

from adfkit.bundle import bundle_modules, parse_manifest, resolve_modules
from adfkit.constants import ADFKIT_VERSION
from adfkit.core import (
    AdfDocument,
    AdfSection,
    apply_patches,
    format_adf,
    parse_adf,
    validate_constraints,
)
from adfkit.migrate import build_migration_plan, parse_markdown_sections

__version__ = ADFKIT_VERSION

__all__ = [
    "AdfDocument",
    "AdfSection",
    "__version__",
    "apply_patches",
    "build_migration_plan",
    "bundle_modules",
    "format_adf",
    "parse_adf",
    "parse_manifest",
    "parse_markdown_sections",
    "resolve_modules",
    "validate_constraints",
]
