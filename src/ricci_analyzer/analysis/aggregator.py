"""Merge per-file results into one immutable AnalysisReport.

``aggregate`` is a pure function of its inputs: the same records in the same
order always produce an equal report.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from typing import Union

from ..metrics.complexity import average
from ..models import (
    ALL_ANALYSES,
    UNKNOWN_LANGUAGE,
    AnalysisKind,
    AnalysisReport,
    AnalysisWarning,
    ComplexityScore,
    DependencyRecord,
    DirectorySummary,
    FileRecord,
    LanguageStat,
    Smell,
)

ROOT_DIRECTORY = "."

# Directory name -> one-line purpose guess.
_DIRECTORY_PURPOSES = {
    "src": "Source code",
    "lib": "Library code",
    "app": "Application code",
    "pkg": "Library packages",
    "cmd": "Command entry points",
    "internal": "Internal packages",
    "test": "Tests",
    "tests": "Tests",
    "spec": "Tests",
    "__tests__": "Tests",
    "fixtures": "Test fixtures",
    "bench": "Benchmarks",
    "benches": "Benchmarks",
    "benchmarks": "Benchmarks",
    "doc": "Documentation",
    "docs": "Documentation",
    "example": "Examples",
    "examples": "Examples",
    "scripts": "Scripts",
    "bin": "Executables and scripts",
    "tools": "Developer tooling",
    "config": "Configuration",
    "conf": "Configuration",
    ".github": "CI configuration",
    ".circleci": "CI configuration",
    "assets": "Static assets",
    "static": "Static assets",
    "public": "Static assets",
    "include": "Header files",
    "migrations": "Database migrations",
    "data": "Data files",
    "deploy": "Deployment",
    "docker": "Container configuration",
    "i18n": "Translations",
    "locales": "Translations",
}


def aggregate(
    root: str,
    file_records: Iterable[FileRecord],
    dependency_records: Iterable[DependencyRecord] = (),
    complexity_scores: Iterable[ComplexityScore] = (),
    smells: Iterable[Smell] = (),
    warnings: Iterable[AnalysisWarning] = (),
    analyses: Iterable[Union[AnalysisKind, str]] = ALL_ANALYSES,
) -> AnalysisReport:
    """Build the report.

    Args:
        root: Analysis root as given by the caller
        file_records: One record per walked file, in traversal order
        dependency_records: Dependencies in traversal order; for duplicate
            keys the last record wins
        complexity_scores: Per-file scores
        smells: Per-file smells
        warnings: Non-fatal conditions from every stage
        analyses: Analysis kinds that ran; sections for other kinds are empty

    Returns:
        AnalysisReport
    """
    kinds = tuple(AnalysisKind(kind) for kind in analyses)
    files = tuple(file_records)
    total_lines = sum(f.line_count for f in files)

    languages: tuple[LanguageStat, ...] = ()
    directories: tuple[DirectorySummary, ...] = ()
    if AnalysisKind.STRUCTURE in kinds:
        languages = language_stats(files, total_lines)
        directories = directory_summaries(files)

    dependencies: tuple[DependencyRecord, ...] = ()
    if AnalysisKind.DEPENDENCIES in kinds:
        dependencies = merge_dependencies(dependency_records)

    ranked: tuple[ComplexityScore, ...] = ()
    if AnalysisKind.COMPLEXITY in kinds:
        ranked = tuple(sorted(complexity_scores, key=lambda s: (-s.score, s.path)))

    found: tuple[Smell, ...] = ()
    if AnalysisKind.SMELLS in kinds:
        found = tuple(sorted(smells, key=lambda s: s.sort_key))

    return AnalysisReport(
        root=root,
        total_file_count=len(files),
        total_line_count=total_lines,
        languages=languages,
        dependencies=dependencies,
        complexity=ranked,
        smells=found,
        directories=directories,
        warnings=tuple(sorted(warnings, key=lambda w: w.sort_key)),
        analyses=kinds,
        average_complexity=average(ranked),
        files=files,
    )


def language_stats(files: tuple[FileRecord, ...], total_lines: int) -> tuple[LanguageStat, ...]:
    """Per-language totals, largest first. Unknown, binary and unread files are left out."""
    file_counts: Counter[str] = Counter()
    line_counts: Counter[str] = Counter()
    for record in files:
        if record.language == UNKNOWN_LANGUAGE or not record.has_content:
            continue
        file_counts[record.language] += 1
        line_counts[record.language] += record.line_count

    stats = [
        LanguageStat(
            language=language,
            file_count=file_counts[language],
            line_count=line_counts[language],
            percentage=round(line_counts[language] / total_lines * 100, 2) if total_lines else 0.0,
        )
        for language in file_counts
    ]
    return tuple(sorted(stats, key=lambda s: (-s.line_count, s.language)))


def merge_dependencies(records: Iterable[DependencyRecord]) -> tuple[DependencyRecord, ...]:
    """Deduplicate by (ecosystem, normalized name); the last record seen wins."""
    merged: dict[tuple[str, str], DependencyRecord] = {}
    for record in records:
        merged[record.key] = record
    return tuple(sorted(merged.values(), key=lambda d: (d.key, d.name)))


def directory_summaries(files: tuple[FileRecord, ...]) -> tuple[DirectorySummary, ...]:
    """Group files by top-level path segment (``.`` for files at the root)."""
    groups: dict[str, list[FileRecord]] = defaultdict(list)
    for record in files:
        head, sep, _ = record.relative_path.partition("/")
        groups[head if sep else ROOT_DIRECTORY].append(record)

    return tuple(
        DirectorySummary(
            path=name,
            file_count=len(members),
            line_count=sum(r.line_count for r in members),
            purpose=directory_purpose(name, members),
        )
        for name, members in sorted(groups.items())
    )


def directory_purpose(name: str, members: Iterable[FileRecord] = ()) -> str:
    """Guess what a top-level directory is for from its name, then its contents."""
    if name == ROOT_DIRECTORY:
        return "Project root files"
    purpose = _DIRECTORY_PURPOSES.get(name.lower())
    if purpose:
        return purpose

    lines_by_language: Counter[str] = Counter()
    for record in members:
        if record.language != UNKNOWN_LANGUAGE and record.has_content:
            lines_by_language[record.language] += max(record.line_count, 1)
    if lines_by_language:
        language = min(lines_by_language, key=lambda lang: (-lines_by_language[lang], lang))
        return f"{language} sources"
    return "Other files"
