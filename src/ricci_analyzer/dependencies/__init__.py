"""Dependency manifest extraction."""

from .extractor import DependencyExtractor
from .parsers import (
    CargoParser,
    ComposerParser,
    GemfileParser,
    GoModParser,
    ManifestParser,
    ManifestResult,
    NpmParser,
    PipfileParser,
    PyprojectParser,
    RequirementsParser,
    get_default_parsers,
)

__all__ = [
    "CargoParser",
    "ComposerParser",
    "DependencyExtractor",
    "GemfileParser",
    "GoModParser",
    "ManifestParser",
    "ManifestResult",
    "NpmParser",
    "PipfileParser",
    "PyprojectParser",
    "RequirementsParser",
    "get_default_parsers",
]
