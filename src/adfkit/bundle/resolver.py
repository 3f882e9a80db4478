# topmark:header:start
#
#   project      : ADFKit
#   file         : resolver.py
#   file_relpath : src/adfkit/bundle/resolver.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Module resolution: which manifest modules to load for a task.

Default-load modules are always included. An on-demand module is added when
any of its triggers matches a task keyword, either exactly (case-insensitive)
or through a conservative prefix-stem rule:

* one string is a prefix of the other,
* the shared prefix has at least 4 characters, and
* the prefix covers at least 66% of the longer string.

This keeps ``Config`` matching ``Configure`` (6/9) while rejecting ``React``
vs ``Reacting`` (5/8).
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from adfkit.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from adfkit.bundle.manifest import Manifest

logger = get_logger(__name__)

MIN_STEM_LENGTH: Final[int] = 4
MIN_STEM_RATIO: Final[float] = 0.66

_KEYWORD_SPLIT_RE: Final[re.Pattern[str]] = re.compile(r"[\s,;:()\[\]{}]+")
_NON_ALNUM_RE: Final[re.Pattern[str]] = re.compile(r"[^a-zA-Z0-9]")


def is_prefix_stem(prefix: str, full: str) -> bool:
    """Return True if ``prefix`` is plausibly a stem of ``full``."""
    return (
        len(prefix) >= MIN_STEM_LENGTH
        and full.startswith(prefix)
        and len(prefix) / len(full) >= MIN_STEM_RATIO
    )


def matches_trigger(trigger: str, keyword: str) -> bool:
    """Match one trigger against one keyword (case-insensitive, with stemming)."""
    t = trigger.lower()
    k = keyword.lower()
    if not t or not k:
        return False
    return t == k or is_prefix_stem(t, k) or is_prefix_stem(k, t)


def matched_keywords(trigger: str, keywords: Iterable[str]) -> list[str]:
    """Return the (lower-cased) keywords that match ``trigger``, in input order."""
    return [k.lower() for k in keywords if matches_trigger(trigger, k)]


def resolve_modules(manifest: Manifest, keywords: Sequence[str]) -> list[str]:
    """Resolve the module paths to load for a set of task keywords.

    Args:
        manifest (Manifest): The parsed manifest.
        keywords (Sequence[str]): Task keywords.

    Returns:
        list[str]: Default-load modules first, then triggered on-demand
            modules in manifest order, without duplicates.
    """
    resolved: dict[str, None] = dict.fromkeys(manifest.default_load)
    for module in manifest.on_demand:
        if module.path in resolved:
            continue
        hit = next(
            (t for t in module.triggers if any(matches_trigger(t, k) for k in keywords)),
            None,
        )
        if hit is not None:
            logger.debug("Module %s triggered by %r", module.path, hit)
            resolved[module.path] = None
    return list(resolved)


def extract_keywords(task: str) -> list[str]:
    """Split a free-text task description into keywords.

    Words are split on whitespace and punctuation, stripped of
    non-alphanumeric characters, and kept when longer than one character.
    """
    words = (_NON_ALNUM_RE.sub("", w) for w in _KEYWORD_SPLIT_RE.split(task))
    return [w for w in words if len(w) > 1]
