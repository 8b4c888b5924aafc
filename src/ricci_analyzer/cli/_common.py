"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..config import AnalysisConfig, load_config

# Status and errors go to stderr; stdout carries only the report.
console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    exclude: Optional[Sequence[str]] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalysisConfig:
    """Build the analysis config from CLI options."""
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if exclude:
        overrides["exclude_dirs"] = tuple(exclude)
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)
