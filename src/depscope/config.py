"""Configuration loading and management for depscope.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalyzerOptions)
    2. Project config (./depscope.toml)
    3. Explicit config file
    4. Environment variables (DEPSCOPE_* prefix)
    5. Keyword overrides (API / CLI)

Example:
    >>> options = load_config(analysis_depth="deep", concurrency=2)
    >>> options.analysis_depth
    'deep'
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .exceptions import ConfigFileError, InvalidConfigError

AnalysisDepth = Literal["basic", "standard", "deep"]

ANALYSIS_DEPTHS: tuple[str, ...] = ("basic", "standard", "deep")


def default_concurrency() -> int:
    """Available parallel execution units minus one, never below 1."""
    return max(1, (os.cpu_count() or 1) - 1)


@dataclass(frozen=True)
class AnalyzerOptions:
    """Options for a single analysis run.

    Attributes:
        Discovery:
            include_dirs: Directories under the root to search
            exclude_dirs: Directory names pruned anywhere in the tree
            include_file_patterns: Glob patterns a file must match
            exclude_file_patterns: Glob patterns that reject a file
            min_file_size_kb: Lower size bound (inclusive)
            max_file_size_kb: Upper size bound (inclusive)
            discovery_cache_ttl_seconds: Validity window of the file-list cache

        Extraction:
            analysis_depth: basic, standard or deep rule set
            concurrency: Worker pool size
            task_timeout_seconds: Per-file time limit inside the pool

        Graph:
            resolve_extensions: Suffixes tried when resolving relative imports
            max_cycle_depth: DFS depth cutoff for cycle detection

        Caching:
            analysis_cache_enabled: Reuse per-file reports across runs
            analysis_cache_ttl_hours: Upper bound on a cached report's age
            cache_dir_name: Cache directory created under the project root
    """

    include_dirs: list[str] = field(default_factory=lambda: ["."])
    exclude_dirs: list[str] = field(
        default_factory=lambda: ["node_modules", "dist", ".git", "coverage"]
    )
    include_file_patterns: list[str] = field(
        default_factory=lambda: ["**/*.ts", "**/*.js", "**/*.tsx", "**/*.jsx"]
    )
    exclude_file_patterns: list[str] = field(
        default_factory=lambda: ["**/*.test.ts", "**/*.spec.ts", "**/*.test.js", "**/*.spec.js"]
    )
    min_file_size_kb: float = 0.0
    max_file_size_kb: float = 1000.0
    discovery_cache_ttl_seconds: int = 3600

    analysis_depth: AnalysisDepth = "standard"
    concurrency: int = field(default_factory=default_concurrency)
    task_timeout_seconds: float = 30.0

    resolve_extensions: list[str] = field(default_factory=lambda: [".ts", ".tsx", ".js", ".jsx"])
    max_cycle_depth: int = 20

    analysis_cache_enabled: bool = True
    analysis_cache_ttl_hours: int = 24
    cache_dir_name: str = ".depscope-cache"

    def __post_init__(self) -> None:
        """Validate option values."""
        if self.analysis_depth not in ANALYSIS_DEPTHS:
            raise InvalidConfigError(
                "analysis_depth", self.analysis_depth, f"must be one of {', '.join(ANALYSIS_DEPTHS)}"
            )
        if self.concurrency < 1:
            raise InvalidConfigError("concurrency", self.concurrency, "must be at least 1")
        if self.min_file_size_kb < 0:
            raise InvalidConfigError("min_file_size_kb", self.min_file_size_kb, "must be non-negative")
        if self.max_file_size_kb < self.min_file_size_kb:
            raise InvalidConfigError(
                "max_file_size_kb", self.max_file_size_kb, "must not be below min_file_size_kb"
            )
        if self.task_timeout_seconds <= 0:
            raise InvalidConfigError(
                "task_timeout_seconds", self.task_timeout_seconds, "must be positive"
            )
        if self.max_cycle_depth < 2:
            raise InvalidConfigError("max_cycle_depth", self.max_cycle_depth, "must be at least 2")
        if self.discovery_cache_ttl_seconds < 0:
            raise InvalidConfigError(
                "discovery_cache_ttl_seconds", self.discovery_cache_ttl_seconds, "must be non-negative"
            )
        if self.analysis_cache_ttl_hours < 0:
            raise InvalidConfigError(
                "analysis_cache_ttl_hours", self.analysis_cache_ttl_hours, "must be non-negative"
            )
        if not self.include_file_patterns:
            raise InvalidConfigError("include_file_patterns", [], "at least one pattern is required")
        for ext in self.resolve_extensions:
            if not ext.startswith("."):
                raise InvalidConfigError("resolve_extensions", ext, "extensions must start with '.'")

    @property
    def min_file_size_bytes(self) -> int:
        return int(self.min_file_size_kb * 1024)

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_kb * 1024)

    @property
    def analysis_cache_ttl_seconds(self) -> int:
        return self.analysis_cache_ttl_hours * 3600

    def cache_dir(self, root: Path) -> Path:
        """Cache directory for a given project root."""
        return Path(root) / self.cache_dir_name


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalyzerOptions:
    """Load options with auto-discovery and merging.

    Args:
        config_file: Optional explicit TOML file
        **overrides: Direct overrides (typically from the API or CLI)

    Returns:
        Validated AnalyzerOptions instance

    Raises:
        ConfigFileError: If a config file is missing or not valid TOML
        InvalidConfigError: If an option is unknown or has a bad value
    """
    merged: dict[str, Any] = {}

    project_config = Path.cwd() / "depscope.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(project_config, str(e))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        try:
            merged.update(_load_toml_file(config_file))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(config_file, str(e))

    merged.update(_load_env_vars())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(AnalyzerOptions)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown option")

    return AnalyzerOptions(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load options from DEPSCOPE_* environment variables.

    List-valued options accept comma-separated values, e.g.
    ``DEPSCOPE_EXCLUDE_DIRS=node_modules,vendor``.
    """
    type_hints = get_type_hints(AnalyzerOptions)
    result: dict[str, Any] = {}

    for f in fields(AnalyzerOptions):
        env_key = f"DEPSCOPE_{f.name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue
        try:
            result[f.name] = _parse_env_value(env_value, type_hints[f.name])
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    origin = getattr(type_hint, "__origin__", None)

    if origin is list:
        return [part.strip() for part in value.split(",") if part.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    return value


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file, accepting either top-level keys or a [depscope] table."""
    with open(path, "rb") as f:
        data = tomllib.load(f)
    section = data.get("depscope", data)
    if not isinstance(section, dict):
        raise ConfigFileError(path, "[depscope] must be a table")
    return dict(section)
