"""Data models for the analysis report.

Every type here is a frozen dataclass: a run produces values, never a
mutable store. ``AnalysisReport.to_dict()`` defines the serialization shape
shared by the JSON, YAML and text formatters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNKNOWN_LANGUAGE = "Unknown"


class AnalysisKind(str, Enum):
    """Subsystems a caller can select."""

    STRUCTURE = "structure"
    DEPENDENCIES = "dependencies"
    COMPLEXITY = "complexity"
    SMELLS = "smells"


ALL_ANALYSES: tuple[AnalysisKind, ...] = tuple(AnalysisKind)


class Ecosystem(str, Enum):
    """Packaging ecosystem a manifest belongs to."""

    CARGO = "cargo"
    NPM = "npm"
    PYPI = "pypi"
    GO = "go"
    RUBYGEMS = "rubygems"
    PACKAGIST = "packagist"


class DependencyScope(str, Enum):
    """Section a dependency was declared in."""

    RUNTIME = "runtime"
    DEV = "dev"
    OPTIONAL = "optional"
    BUILD = "build"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2}


class SmellKind(str, Enum):
    LONG_FUNCTION = "LongFunction"
    DEEP_NESTING = "DeepNesting"
    DUPLICATE_CODE = "DuplicateCode"
    MAGIC_NUMBER = "MagicNumber"
    LONG_PARAMETER_LIST = "LongParameterList"


class WarningKind(str, Enum):
    """Non-fatal conditions collected during a run."""

    PERMISSION_DENIED = "permission_denied"
    UNREADABLE_FILE = "unreadable_file"
    MANIFEST_PARSE_ERROR = "manifest_parse_error"
    MALFORMED_ENTRY = "malformed_entry"
    SYMLINK_SKIPPED = "symlink_skipped"
    FILE_TOO_LARGE = "file_too_large"


@dataclass(frozen=True)
class FileRecord:
    """One walked file."""

    path: str
    relative_path: str
    language: str
    line_count: int
    size_bytes: int
    is_binary: bool = False
    is_readable: bool = True

    @property
    def has_content(self) -> bool:
        """True when the file took part in line counting."""
        return self.is_readable and not self.is_binary

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.relative_path,
            "language": self.language,
            "line_count": self.line_count,
            "size_bytes": self.size_bytes,
            "is_binary": self.is_binary,
            "is_readable": self.is_readable,
        }


@dataclass(frozen=True)
class LanguageStat:
    language: str
    file_count: int
    line_count: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "file_count": self.file_count,
            "line_count": self.line_count,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class DependencyRecord:
    """A declared dependency.

    ``version`` is the raw constraint string as written in the manifest.
    """

    manifest: str
    name: str
    version: str
    ecosystem: Ecosystem
    scope: DependencyScope = DependencyScope.RUNTIME

    @property
    def key(self) -> tuple[str, str]:
        """Uniqueness key: ecosystem plus normalized package name."""
        return (self.ecosystem.value, normalize_package_name(self.name, self.ecosystem))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "ecosystem": self.ecosystem.value,
            "scope": self.scope.value,
            "manifest": self.manifest,
        }


def normalize_package_name(name: str, ecosystem: Ecosystem) -> str:
    """Normalize a package name the way its registry compares names.

    PyPI treats runs of ``-``, ``_`` and ``.`` as equivalent and is
    case-insensitive; the other registries compare names verbatim.
    """
    if ecosystem is Ecosystem.PYPI:
        return "-".join(part for part in _PYPI_SEPARATORS.split(name.lower()) if part)
    return name


_PYPI_SEPARATORS = re.compile(r"[-_.]+")


@dataclass(frozen=True)
class ComplexityScore:
    """Lexical complexity of one source file.

    score = branch_count + 2 * max_nesting_depth
            + max(0, longest_function_lines - function_length_threshold)
    """

    path: str
    score: int
    branch_count: int
    max_nesting_depth: int
    longest_function_lines: int
    function_count: int = 0
    line_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "score": self.score,
            "branch_count": self.branch_count,
            "max_nesting_depth": self.max_nesting_depth,
            "longest_function_lines": self.longest_function_lines,
            "function_count": self.function_count,
            "line_count": self.line_count,
        }


@dataclass(frozen=True)
class Smell:
    """A heuristic finding. Lines are 1-based and inclusive."""

    kind: SmellKind
    path: str
    start_line: int
    end_line: int
    severity: Severity
    rationale: str

    @property
    def sort_key(self) -> tuple:
        return (-self.severity.rank, self.path, self.start_line, self.kind.value, self.end_line)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "severity": self.severity.value,
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class DirectorySummary:
    path: str
    file_count: int
    line_count: int
    purpose: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "file_count": self.file_count,
            "line_count": self.line_count,
            "purpose": self.purpose,
        }


@dataclass(frozen=True)
class AnalysisWarning:
    kind: WarningKind
    path: str
    message: str

    @property
    def sort_key(self) -> tuple[str, str, str]:
        return (self.path, self.kind.value, self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "path": self.path, "message": self.message}


@dataclass(frozen=True)
class AnalysisReport:
    """The single output value of one analysis run."""

    root: str
    total_file_count: int = 0
    total_line_count: int = 0
    languages: tuple[LanguageStat, ...] = ()
    dependencies: tuple[DependencyRecord, ...] = ()
    complexity: tuple[ComplexityScore, ...] = ()
    smells: tuple[Smell, ...] = ()
    directories: tuple[DirectorySummary, ...] = ()
    warnings: tuple[AnalysisWarning, ...] = ()
    analyses: tuple[AnalysisKind, ...] = ALL_ANALYSES
    average_complexity: float = 0.0
    files: tuple[FileRecord, ...] = field(default=(), compare=False, repr=False)

    @property
    def dev_dependencies(self) -> tuple[DependencyRecord, ...]:
        return tuple(d for d in self.dependencies if d.scope is DependencyScope.DEV)

    def smells_for(self, path: str) -> tuple[Smell, ...]:
        return tuple(s for s in self.smells if s.path == path)

    def to_dict(self) -> dict[str, Any]:
        """Serialization shape shared by every output format."""
        return {
            "root": self.root,
            "analyses": [kind.value for kind in self.analyses],
            "total_file_count": self.total_file_count,
            "total_line_count": self.total_line_count,
            "average_complexity": self.average_complexity,
            "languages": [stat.to_dict() for stat in self.languages],
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "complexity": [score.to_dict() for score in self.complexity],
            "smells": [smell.to_dict() for smell in self.smells],
            "directories": [summary.to_dict() for summary in self.directories],
            "warnings": [warning.to_dict() for warning in self.warnings],
        }
