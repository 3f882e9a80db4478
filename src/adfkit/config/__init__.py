# topmark:header:start
#
#   project      : ADFKit
#   file         : __init__.py
#   file_relpath : src/adfkit/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration handling for ADFKit.

Defines the immutable `AdfkitConfig`, the `MutableConfig` builder used while
merging layers, and `load_config` which resolves the layers in order
(lowest to highest precedence):

1. built-in defaults,
2. ``[tool.adfkit]`` in ``pyproject.toml`` of the working directory,
3. ``adfkit.toml`` in the working directory,
4. an explicit ``--config`` file.

Example ``adfkit.toml``::

    ai_dir = ".ai"

    [migrate]
    merge_strategy = "dedupe"
    sources = ["CLAUDE.md", ".cursorrules"]
    backup = true

    [evidence]
    stale_threshold = 1.2
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from adfkit.config.io import (
    AdfkitConfigError,
    TomlTable,
    get_bool_or_none,
    get_float_or_none,
    get_string_list_or_none,
    get_string_or_none,
    get_table_value,
    load_toml_dict,
)
from adfkit.config.logging import AdfkitLogger, get_logger
from adfkit.constants import (
    ADFKIT_TOML_NAME,
    DEFAULT_AI_DIR,
    DEFAULT_MERGE_STRATEGY,
    DEFAULT_STALE_THRESHOLD,
    MAX_STALE_THRESHOLD,
    MERGE_STRATEGY_VALUES,
    MIN_STALE_THRESHOLD,
    PYPROJECT_TOML_NAME,
    PYPROJECT_TOOL_SECTION,
)

logger: AdfkitLogger = get_logger(__name__)

DEFAULT_AGENT_SOURCES: tuple[str, ...] = (
    "CLAUDE.md",
    ".cursorrules",
    "agents.md",
    "GEMINI.md",
    "copilot-instructions.md",
)

__all__ = [
    "AdfkitConfig",
    "AdfkitConfigError",
    "MutableConfig",
    "load_config",
    "validate_stale_threshold",
]


@dataclass(frozen=True)
class AdfkitConfig:
    """Immutable runtime configuration.

    Attributes:
        ai_dir (str): Directory holding ``manifest.adf`` and the modules.
        merge_strategy (str): Migration merge strategy (append, dedupe, replace).
        sources (tuple[str, ...]): Agent config files scanned by ``migrate``.
        backup (bool): Whether ``migrate`` backs up a source before rewriting it.
        stale_threshold (float): Ratio at which a metric baseline counts as stale.
        config_files (tuple[Path, ...]): Files that contributed to this config.
    """

    ai_dir: str = DEFAULT_AI_DIR
    merge_strategy: str = DEFAULT_MERGE_STRATEGY
    sources: tuple[str, ...] = DEFAULT_AGENT_SOURCES
    backup: bool = True
    stale_threshold: float = DEFAULT_STALE_THRESHOLD
    config_files: tuple[Path, ...] = ()


def validate_stale_threshold(value: float) -> float:
    """Return ``value`` if it lies within the accepted stale-threshold range.

    Raises:
        AdfkitConfigError: If the value is out of range.
    """
    if not MIN_STALE_THRESHOLD <= value <= MAX_STALE_THRESHOLD:
        raise AdfkitConfigError(
            f"Invalid stale threshold: {value}. "
            f"Use a number between {MIN_STALE_THRESHOLD} and {MAX_STALE_THRESHOLD}."
        )
    return value


@dataclass
class MutableConfig:
    """Mutable configuration used while merging layers.

    Fields left as None inherit from the layer below; `freeze` fills the
    remaining gaps with defaults.
    """

    ai_dir: str | None = None
    merge_strategy: str | None = None
    sources: list[str] | None = None
    backup: bool | None = None
    stale_threshold: float | None = None
    config_files: list[Path] = field(default_factory=lambda: [])

    def freeze(self) -> AdfkitConfig:
        """Freeze this builder into an immutable `AdfkitConfig`."""
        return AdfkitConfig(
            ai_dir=self.ai_dir if self.ai_dir is not None else DEFAULT_AI_DIR,
            merge_strategy=(
                self.merge_strategy if self.merge_strategy is not None else DEFAULT_MERGE_STRATEGY
            ),
            sources=tuple(self.sources) if self.sources is not None else DEFAULT_AGENT_SOURCES,
            backup=self.backup if self.backup is not None else True,
            stale_threshold=(
                self.stale_threshold
                if self.stale_threshold is not None
                else DEFAULT_STALE_THRESHOLD
            ),
            config_files=tuple(self.config_files),
        )

    def merge_with(self, other: MutableConfig) -> MutableConfig:
        """Return a new draft where values set in ``other`` override this draft."""
        return MutableConfig(
            ai_dir=other.ai_dir if other.ai_dir is not None else self.ai_dir,
            merge_strategy=(
                other.merge_strategy if other.merge_strategy is not None else self.merge_strategy
            ),
            sources=other.sources if other.sources is not None else self.sources,
            backup=other.backup if other.backup is not None else self.backup,
            stale_threshold=(
                other.stale_threshold
                if other.stale_threshold is not None
                else self.stale_threshold
            ),
            config_files=[*self.config_files, *other.config_files],
        )

    @classmethod
    def from_toml_dict(cls, data: TomlTable, *, source: Path | None = None) -> MutableConfig:
        """Build a draft from a parsed ``adfkit.toml`` table.

        Args:
            data (TomlTable): Parsed TOML, already narrowed to the adfkit table.
            source (Path | None): File the data came from, recorded for provenance.

        Returns:
            MutableConfig: The draft.

        Raises:
            AdfkitConfigError: If a value has the wrong type or is out of range.
        """
        migrate_tbl = get_table_value(data, "migrate")
        evidence_tbl = get_table_value(data, "evidence")

        merge_strategy = get_string_or_none(migrate_tbl, "merge_strategy", where="[migrate]")
        if merge_strategy is not None and merge_strategy not in MERGE_STRATEGY_VALUES:
            raise AdfkitConfigError(
                f"Invalid value for [migrate].merge_strategy: {merge_strategy!r} "
                f"(allowed: {', '.join(MERGE_STRATEGY_VALUES)})"
            )
        stale_threshold = get_float_or_none(evidence_tbl, "stale_threshold", where="[evidence]")
        if stale_threshold is not None:
            validate_stale_threshold(stale_threshold)

        return cls(
            ai_dir=get_string_or_none(data, "ai_dir", where="[adfkit]"),
            merge_strategy=merge_strategy,
            sources=get_string_list_or_none(migrate_tbl, "sources", where="[migrate]"),
            backup=get_bool_or_none(migrate_tbl, "backup", where="[migrate]"),
            stale_threshold=stale_threshold,
            config_files=[source] if source is not None else [],
        )

    @classmethod
    def from_toml_file(cls, path: Path) -> MutableConfig:
        """Load a draft from ``adfkit.toml`` or ``pyproject.toml`` (``[tool.adfkit]``)."""
        data = load_toml_dict(path)
        if path.name == PYPROJECT_TOML_NAME:
            data = get_table_value(get_table_value(data, "tool"), PYPROJECT_TOOL_SECTION)
        logger.debug("Loaded config from %s: %r", path, data)
        return cls.from_toml_dict(data, source=path)


def load_config(cwd: Path | None = None, config_path: Path | None = None) -> AdfkitConfig:
    """Resolve the configuration layers into an `AdfkitConfig`.

    Args:
        cwd (Path | None): Directory searched for ``pyproject.toml`` and
            ``adfkit.toml`` (defaults to the current working directory).
        config_path (Path | None): Explicit config file, merged last.

    Returns:
        AdfkitConfig: The merged configuration.

    Raises:
        AdfkitConfigError: If ``config_path`` does not exist or a value is invalid.
    """
    base = cwd if cwd is not None else Path.cwd()
    draft = MutableConfig()
    for name in (PYPROJECT_TOML_NAME, ADFKIT_TOML_NAME):
        candidate = base / name
        if candidate.is_file():
            draft = draft.merge_with(MutableConfig.from_toml_file(candidate))
    if config_path is not None:
        if not config_path.is_file():
            raise AdfkitConfigError(f"Config file not found: {config_path}")
        draft = draft.merge_with(MutableConfig.from_toml_file(config_path))
    config = draft.freeze()
    logger.trace("Resolved config: %r", config)
    return config
