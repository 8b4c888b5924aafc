"""
Deterministic source tree traversal.

Provides the file walk and binary sniffing used by the analysis engine.
"""

import os
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from ..config import DEFAULT_CONFIG, AnalysisConfig
from ..exceptions import FileAccessError, PathNotFoundError
from ..logging_config import get_logger
from ..models import AnalysisWarning, WarningKind

logger = get_logger(__name__)

# Control bytes that still occur in ordinary text files.
_TEXT_CONTROL_BYTES = frozenset({0x07, 0x08, 0x09, 0x0A, 0x0C, 0x0D, 0x1B})


@dataclass(frozen=True)
class WalkEntry:
    """A regular file found by the walker."""

    path: Path
    relative_path: str
    size_bytes: int


class TreeWalker:
    """Depth-first walk of a project tree in sorted name order.

    Symbolic links are never followed. Each one, along with every directory
    that cannot be listed, is recorded in ``warnings`` as the walk proceeds.
    Calling ``walk()`` again re-reads the filesystem and resets ``warnings``.
    """

    def __init__(self, root: Union[str, Path], config: Optional[AnalysisConfig] = None):
        self.root = Path(root)
        self.config = config or DEFAULT_CONFIG
        self.warnings: list[AnalysisWarning] = []
        self._skipped_dirs = self.config.skipped_dirs

    def walk(self) -> Generator[WalkEntry, None, None]:
        """
        Yield every regular file under the root.

        Raises:
            PathNotFoundError: If the root is missing or not a directory
        """
        if not self.root.exists():
            raise PathNotFoundError(self.root)
        if not self.root.is_dir():
            raise PathNotFoundError(self.root, "Path is not a directory")

        self.warnings = []
        yield from self._walk_dir(self.root, PurePosixPath())

    def _walk_dir(self, directory: Path, relative: PurePosixPath) -> Generator[WalkEntry, None, None]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._warn(WarningKind.PERMISSION_DENIED, relative, f"Cannot list directory: {e.strerror or e}")
            return

        for entry in entries:
            rel = relative / entry.name
            try:
                if entry.is_symlink():
                    self._warn(WarningKind.SYMLINK_SKIPPED, rel, "Symbolic link not followed")
                    continue
                if entry.is_dir(follow_symlinks=False):
                    if entry.name in self._skipped_dirs:
                        logger.debug(f"Skipped directory: {rel}")
                        continue
                    yield from self._walk_dir(Path(entry.path), rel)
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
                if self._excluded(rel):
                    logger.debug(f"Excluded by pattern: {rel}")
                    continue
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                self._warn(WarningKind.PERMISSION_DENIED, rel, f"Cannot stat entry: {e.strerror or e}")
                continue

            yield WalkEntry(path=Path(entry.path), relative_path=rel.as_posix(), size_bytes=size)

    def _excluded(self, relative: PurePosixPath) -> bool:
        return any(relative.match(pattern) for pattern in self.config.exclude_patterns)

    def _warn(self, kind: WarningKind, relative: PurePosixPath, message: str) -> None:
        path = relative.as_posix() if relative.parts else "."
        logger.warning(f"{path}: {message}")
        self.warnings.append(AnalysisWarning(kind=kind, path=path, message=message))


def is_binary_content(sample: bytes, ratio_threshold: float = 0.30) -> bool:
    """
    Decide whether a leading byte sample looks binary.

    A NUL byte is conclusive; otherwise the sample is binary when the share
    of control bytes outside ordinary whitespace exceeds ``ratio_threshold``.
    Bytes >= 0x80 count as text so UTF-8 content is not misjudged.
    """
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    non_text = sum(1 for b in sample if (b < 0x20 or b == 0x7F) and b not in _TEXT_CONTROL_BYTES)
    return non_text / len(sample) > ratio_threshold


def sniff_binary(path: Path, sample_bytes: int = 8192, ratio_threshold: float = 0.30) -> bool:
    """
    Read the head of a file and apply ``is_binary_content``.

    Raises:
        FileAccessError: If the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            sample = f.read(sample_bytes)
    except OSError as e:
        raise FileAccessError(path, f"Cannot read file: {e.strerror or e}")
    return is_binary_content(sample, ratio_threshold)
