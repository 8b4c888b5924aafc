"""
Ricci Analyzer - Local Project Analysis Engine

Turns a source tree into an immutable report: language statistics, declared
dependencies, per-file complexity scores, heuristic code smells and
top-level directory summaries.
"""

__version__ = "0.3.0"

from .api import analyze
from .config import AnalysisConfig, ThresholdConfig, load_config
from .models import AnalysisKind, AnalysisReport

__all__ = [
    "analyze",  # Main entry point
    "AnalysisConfig",
    "AnalysisKind",
    "AnalysisReport",
    "ThresholdConfig",
    "load_config",
]
