"""Analysis orchestration and aggregation."""

from .aggregator import aggregate, directory_purpose, language_stats, merge_dependencies
from .engine import AnalysisEngine, FileResult, normalize_analyses

__all__ = [
    "AnalysisEngine",
    "FileResult",
    "aggregate",
    "directory_purpose",
    "language_stats",
    "merge_dependencies",
    "normalize_analyses",
]
