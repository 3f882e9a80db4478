# topmark:header:start
#
#   project      : ADFKit
#   file         : conftest.py
#   file_relpath : tests/migrate/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Shared markdown fixtures for the migration tests."""

from __future__ import annotations

import pytest

AGENT_MARKDOWN = """# Project Guide

Intro prose line.

## Code Style
- NEVER commit secrets
- Prefer small functions
- Use snake_case for modules

## Git Workflow
- Squash commits before merge

## Frontend UI
- Components live in src/components

## Environment
- Running under WSL: use /mnt/c/ paths

## Build
```bash
npm install
npm test
npm run lint
npm run build
```

| Command | Purpose |
|---|---|
| make | build |
"""


@pytest.fixture
def agent_markdown() -> str:
    """Return a small CLAUDE.md-style document touching every routing rule."""
    return AGENT_MARKDOWN
