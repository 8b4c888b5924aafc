"""Analysis engine: walk, per-file work on a thread pool, aggregate."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import DEFAULT_CONFIG, AnalysisConfig
from ..dependencies import DependencyExtractor
from ..logging_config import get_logger
from ..metrics.complexity import score as score_complexity
from ..metrics.lexer import profile_source
from ..models import (
    ALL_ANALYSES,
    UNKNOWN_LANGUAGE,
    AnalysisKind,
    AnalysisReport,
    AnalysisWarning,
    ComplexityScore,
    DependencyRecord,
    FileRecord,
    Smell,
    WarningKind,
)
from ..scanning.languages import classify, count_lines
from ..scanning.walker import TreeWalker, WalkEntry, is_binary_content
from ..smells import detect
from .aggregator import aggregate

logger = get_logger(__name__)

# Below this many files the pool costs more than it saves.
_PARALLEL_MIN_FILES = 10


@dataclass(frozen=True)
class FileResult:
    """Everything the per-file stage produced for one walked file."""

    record: FileRecord
    dependencies: tuple[DependencyRecord, ...] = ()
    complexity: Optional[ComplexityScore] = None
    smells: tuple[Smell, ...] = ()
    warnings: tuple[AnalysisWarning, ...] = ()


def normalize_analyses(
    analyses: Optional[Iterable[Union[AnalysisKind, str]]],
) -> tuple[AnalysisKind, ...]:
    """Resolve an analysis selection; None, empty or "all" selects everything.

    Raises:
        ValueError: On an unknown analysis name
    """
    if analyses is None:
        return ALL_ANALYSES
    selected = set()
    for kind in analyses:
        if kind == "all":
            return ALL_ANALYSES
        selected.add(AnalysisKind(kind))
    if not selected:
        return ALL_ANALYSES
    return tuple(kind for kind in ALL_ANALYSES if kind in selected)


class AnalysisEngine:
    """Runs one analysis of a project tree.

    The engine holds no state between runs: every ``run()`` re-walks the
    tree and returns a fresh report.
    """

    def __init__(
        self,
        root: Union[str, Path],
        config: Optional[AnalysisConfig] = None,
        analyses: Optional[Iterable[Union[AnalysisKind, str]]] = None,
    ):
        self.root = Path(root)
        self.config = config or DEFAULT_CONFIG
        self.analyses = normalize_analyses(analyses)
        self.extractor = DependencyExtractor()

    def run(self) -> AnalysisReport:
        """
        Analyze the tree.

        Returns:
            AnalysisReport

        Raises:
            PathNotFoundError: If the root is missing or not a directory
        """
        walker = TreeWalker(self.root, self.config)
        entries = list(walker.walk())
        workers = self.config.effective_workers
        logger.info(f"Analyzing {len(entries)} files under {self.root} ({workers} workers)")

        if workers == 1 or len(entries) < _PARALLEL_MIN_FILES:
            results = [self.analyze_file(entry) for entry in entries]
        else:
            # map() yields in submission order, so results follow the walk
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self.analyze_file, entries))

        warnings = list(walker.warnings)
        dependencies: list[DependencyRecord] = []
        scores: list[ComplexityScore] = []
        smells: list[Smell] = []
        for result in results:
            warnings.extend(result.warnings)
            dependencies.extend(result.dependencies)
            if result.complexity is not None:
                scores.append(result.complexity)
            smells.extend(result.smells)

        report = aggregate(
            str(self.root),
            [result.record for result in results],
            dependencies,
            scores,
            smells,
            warnings,
            self.analyses,
        )
        logger.info(
            f"Analyzed {report.total_file_count} files, {report.total_line_count} lines, "
            f"{len(report.warnings)} warnings"
        )
        return report

    def analyze_file(self, entry: WalkEntry) -> FileResult:
        """Read, classify and measure one file. Never raises for I/O problems."""
        cfg = self.config
        rel = entry.relative_path

        if entry.size_bytes > cfg.max_file_size_bytes:
            logger.warning(f"{rel}: larger than {cfg.max_file_size_mb} MB, not read")
            return FileResult(
                record=self._record(entry, classify(entry.path), 0, is_readable=False),
                warnings=(
                    AnalysisWarning(
                        kind=WarningKind.FILE_TOO_LARGE,
                        path=rel,
                        message=f"File exceeds {cfg.max_file_size_mb} MB and was not read",
                    ),
                ),
            )

        try:
            data = entry.path.read_bytes()
        except OSError as e:
            logger.warning(f"{rel}: cannot read file: {e.strerror or e}")
            return FileResult(
                record=self._record(entry, classify(entry.path), 0, is_readable=False),
                warnings=(
                    AnalysisWarning(
                        kind=WarningKind.UNREADABLE_FILE,
                        path=rel,
                        message=f"Cannot read file: {e.strerror or e}",
                    ),
                ),
            )

        if is_binary_content(data[: cfg.binary_sample_bytes], cfg.binary_ratio_threshold):
            logger.debug(f"{rel}: binary")
            return FileResult(record=self._record(entry, classify(entry.path), 0, is_binary=True))

        text = data.decode("utf-8-sig", errors="replace")
        first_line = text.split("\n", 1)[0] if text.startswith("#!") else None
        language = classify(entry.path, first_line)
        record = self._record(entry, language, count_lines(text))

        dependencies: tuple[DependencyRecord, ...] = ()
        warnings: tuple[AnalysisWarning, ...] = ()
        if AnalysisKind.DEPENDENCIES in self.analyses and self.extractor.is_manifest(rel):
            extracted = self.extractor.extract(rel, text)
            dependencies, warnings = extracted.records, extracted.warnings

        complexity: Optional[ComplexityScore] = None
        smells: tuple[Smell, ...] = ()
        wants_complexity = AnalysisKind.COMPLEXITY in self.analyses
        wants_smells = AnalysisKind.SMELLS in self.analyses
        if language != UNKNOWN_LANGUAGE and (wants_complexity or wants_smells):
            profile = profile_source(text, language)
            file_score = score_complexity(text, language, cfg.thresholds, path=rel, profile=profile)
            if wants_smells:
                smells = detect(text, file_score, language, cfg.thresholds, profile=profile)
            if wants_complexity:
                complexity = file_score

        logger.debug(f"{rel}: {language}, {record.line_count} lines")
        return FileResult(
            record=record,
            dependencies=dependencies,
            complexity=complexity,
            smells=smells,
            warnings=warnings,
        )

    @staticmethod
    def _record(
        entry: WalkEntry,
        language: str,
        line_count: int,
        is_binary: bool = False,
        is_readable: bool = True,
    ) -> FileRecord:
        return FileRecord(
            path=str(entry.path),
            relative_path=entry.relative_path,
            language=language,
            line_count=line_count,
            size_bytes=entry.size_bytes,
            is_binary=is_binary,
            is_readable=is_readable,
        )
