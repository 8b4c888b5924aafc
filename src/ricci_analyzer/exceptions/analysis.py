"""Analysis-related exceptions: missing roots, unreadable files, manifests."""

from pathlib import Path
from typing import Optional

from .base import RicciAnalyzerError


class AnalysisError(RicciAnalyzerError):
    """Base class for analysis-related errors."""
    pass


class PathNotFoundError(AnalysisError):
    """Raised when the analysis root does not exist or is not a directory.

    This is the only condition that aborts a run.
    """

    def __init__(self, path: Path, reason: str = "Path does not exist"):
        super().__init__(
            f"Analysis root not found: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ManifestParseError(AnalysisError):
    """Raised when a dependency manifest cannot be parsed as a whole."""

    def __init__(self, manifest: str, reason: str, line: Optional[int] = None):
        details = {"manifest": manifest, "reason": reason}
        if line is not None:
            details["line"] = str(line)

        super().__init__(f"Failed to parse manifest: {manifest}", details=details)
        self.manifest = manifest
        self.reason = reason
        self.line = line
