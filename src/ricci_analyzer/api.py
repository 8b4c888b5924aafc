"""Public API for Ricci Analyzer.

Example:
    >>> from ricci_analyzer import analyze
    >>>
    >>> # Everything, default settings
    >>> report = analyze("/path/to/project")
    >>>
    >>> # Only dependencies, with overrides
    >>> report = analyze(
    ...     "/path/to/project",
    ...     analyses=["dependencies"],
    ...     workers=2,
    ... )
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Union

from .analysis import AnalysisEngine
from .config import AnalysisConfig, load_config
from .logging_config import get_logger
from .models import AnalysisKind, AnalysisReport

logger = get_logger(__name__)


def analyze(
    path: Union[str, Path] = ".",
    analyses: Optional[Iterable[Union[AnalysisKind, str]]] = None,
    config: Optional[AnalysisConfig] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> AnalysisReport:
    """Analyze a project tree and return its report.

    Args:
        path: Project root (default: current directory)
        analyses: Analysis kinds to run ("structure", "dependencies",
            "complexity", "smells" or "all"); None runs everything
        config: Explicit configuration. When omitted, configuration is
            discovered with ``load_config(config_file, **overrides)``.
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g. workers=2)

    Returns:
        AnalysisReport

    Raises:
        PathNotFoundError: If ``path`` is missing or not a directory
        ConfigurationError: If configuration is invalid
        ValueError: If an analysis name is unknown
    """
    if config is None:
        config = load_config(config_file=config_file, **overrides)
    elif config_file is not None or overrides:
        raise ValueError("Pass either an explicit config or config_file/overrides, not both")

    logger.debug(f"Configuration: workers={config.effective_workers}, verbosity={config.verbosity}")
    return AnalysisEngine(path, config=config, analyses=analyses).run()
