"""Exception hierarchy for Ricci Analyzer."""

from .analysis import (
    AnalysisError,
    FileAccessError,
    ManifestParseError,
    PathNotFoundError,
)
from .base import RicciAnalyzerError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "RicciAnalyzerError",
    "AnalysisError",
    "PathNotFoundError",
    "FileAccessError",
    "ManifestParseError",
    "ConfigurationError",
    "InvalidConfigError",
]
