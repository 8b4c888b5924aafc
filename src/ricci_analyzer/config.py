"""Configuration loading and management for Ricci Analyzer.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.ricci-analyzer.toml)
    3. Project config (./ricci-analyzer.toml)
    4. Explicit config file
    5. Environment variables (RICCI_* prefix)
    6. CLI overrides (passed as kwargs)

The resulting AnalysisConfig is an immutable value handed to the engine's
entry point, so concurrent runs with different settings never share state.

Example:
    >>> config = load_config(workers=2, verbose=True)
    >>> config.workers
    2
    >>> config.verbosity
    'verbose'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

# Type aliases for clarity
Verbosity = Literal["quiet", "normal", "verbose"]

# Directories that never contain project sources worth analyzing.
VCS_DIRS = (".git", ".hg", ".svn", ".bzr")
BUILD_DIRS = (
    "target",
    "node_modules",
    "dist",
    "build",
    "out",
    "vendor",
    "__pycache__",
    "venv",
    ".venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".eggs",
    ".gradle",
    ".idea",
    ".next",
    "coverage",
    "htmlcov",
)


@dataclass(frozen=True)
class ThresholdConfig:
    """Complexity and smell thresholds.

    Attributes:
        function_length_threshold: Function length (lines) above which the
            complexity score adds one point per extra line
        long_function_lines: Function length that triggers LongFunction
        max_nesting_depth: Block depth above which DeepNesting is reported
        duplicate_min_lines: Minimum size of a repeated block for DuplicateCode
        max_parameters: Parameter count above which LongParameterList fires
        magic_number_allowlist: Literals never reported as MagicNumber
    """

    function_length_threshold: int = 50
    long_function_lines: int = 50
    max_nesting_depth: int = 4
    duplicate_min_lines: int = 6
    max_parameters: int = 5
    magic_number_allowlist: tuple[str, ...] = ("0", "1", "2", "-1", "10", "100")

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        for field_name in (
            "function_length_threshold",
            "long_function_lines",
            "max_nesting_depth",
            "duplicate_min_lines",
            "max_parameters",
        ):
            if getattr(self, field_name) < 1:
                raise ValueError(f"{field_name} must be at least 1")

        # TOML hands us lists and numbers; normalize to a tuple of strings
        allowlist = tuple(str(v) for v in self.magic_number_allowlist)
        object.__setattr__(self, "magic_number_allowlist", allowlist)


# Default threshold configuration (singleton)
DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one analysis run.

    Attributes:
        Performance tuning:
            workers: Size of the per-file worker pool (None = auto-detect)

        File filtering:
            exclude_dirs: Extra directory names to skip (on top of VCS and
                build directories)
            exclude_patterns: Glob patterns matched against relative file paths
            max_file_size_mb: Files above this size are counted but not read

        Binary detection:
            binary_sample_bytes: Number of leading bytes sampled per file
            binary_ratio_threshold: Ratio of non-text bytes that marks a file
                as binary

        Output control:
            verbosity: Logging verbosity level

        thresholds: Complexity and smell thresholds
    """

    # Performance tuning
    workers: Optional[int] = None  # None = min(cpu_count, 8)

    # File filtering
    exclude_dirs: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    max_file_size_mb: float = 10.0

    # Binary detection
    binary_sample_bytes: int = 8192
    binary_ratio_threshold: float = 0.30

    # Output control
    verbosity: Verbosity = "normal"

    # Thresholds (nested config)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.binary_sample_bytes < 1:
            raise ValueError("binary_sample_bytes must be at least 1")
        if not 0.0 < self.binary_ratio_threshold <= 1.0:
            raise ValueError("binary_ratio_threshold must be in (0.0, 1.0]")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError(f"verbosity must be quiet, normal or verbose, got '{self.verbosity}'")

        # Lists from TOML or the CLI become tuples so the config stays hashable
        object.__setattr__(self, "exclude_dirs", tuple(self.exclude_dirs))
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def skipped_dirs(self) -> frozenset[str]:
        """All directory names the walker never descends into."""
        return frozenset(VCS_DIRS + BUILD_DIRS + self.exclude_dirs)

    @property
    def effective_workers(self) -> int:
        """Worker pool size, auto-detected when unset."""
        if self.workers is not None:
            return self.workers
        return min(os.cpu_count() or 4, 8)


DEFAULT_CONFIG = AnalysisConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``verbose``
            and ``quiet`` booleans are translated to ``verbosity``; ``None``
            values are ignored.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    # 1. Global config
    global_config = Path.home() / ".ricci-analyzer.toml"
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    # 2. Project config
    project_config = Path.cwd() / "ricci-analyzer.toml"
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    # 3. Explicit config file (highest priority from files)
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    # 4. Environment variables
    merged.update(_load_env_vars())

    # 5. CLI overrides
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"
    merged.update(overrides)

    # Handle [thresholds] section from TOML
    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, dict):
        try:
            merged["thresholds"] = ThresholdConfig(**thresholds)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid [thresholds] config: {e}")
    elif isinstance(thresholds, ThresholdConfig):
        merged["thresholds"] = thresholds

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _read_config_file(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from RICCI_* environment variables.

    Supported environment variables:
        RICCI_WORKERS: int
        RICCI_MAX_FILE_SIZE_MB: float
        RICCI_BINARY_SAMPLE_BYTES: int
        RICCI_BINARY_RATIO_THRESHOLD: float
        RICCI_VERBOSITY: quiet/normal/verbose
        RICCI_EXCLUDE_DIRS: comma-separated directory names
        RICCI_EXCLUDE_PATTERNS: comma-separated glob patterns

    Returns:
        Dict of field_name -> parsed_value for any RICCI_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)
    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"RICCI_{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot come from the environment
    (e.g. the nested thresholds table).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]: unwrap X
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is tuple:
        return tuple(part.strip() for part in value.split(",") if part.strip())

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    tomllib = load_toml_module()
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_toml_module():
    """Return the TOML parser module: stdlib tomllib, or tomli before 3.11."""
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )
    return tomllib
