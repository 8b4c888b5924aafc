"""Tests for report aggregation."""

from ricci_analyzer.analysis import aggregate, directory_purpose, language_stats, merge_dependencies
from ricci_analyzer.models import (
    AnalysisKind,
    AnalysisWarning,
    ComplexityScore,
    DependencyRecord,
    DependencyScope,
    Ecosystem,
    FileRecord,
    WarningKind,
)


def _file(rel, language, lines, **kwargs):
    return FileRecord(
        path=f"/project/{rel}",
        relative_path=rel,
        language=language,
        line_count=lines,
        size_bytes=lines * 10,
        **kwargs,
    )


FILES = (
    _file("README.md", "Unknown", 10),
    _file("docs/logo.png", "Unknown", 0, is_binary=True),
    _file("setup.py", "Python", 20),
    _file("src/lib.rs", "Rust", 50),
    _file("src/main.py", "Python", 100),
    _file("tests/test_main.py", "Python", 20),
)


def _dep(name, version, manifest, ecosystem=Ecosystem.PYPI, scope=DependencyScope.RUNTIME):
    return DependencyRecord(manifest=manifest, name=name, version=version, ecosystem=ecosystem, scope=scope)


class TestTotals:
    def test_file_and_line_totals(self):
        report = aggregate("/project", FILES)
        assert report.total_file_count == 6
        assert report.total_line_count == 200

    def test_language_stats(self):
        report = aggregate("/project", FILES)
        assert [(s.language, s.file_count, s.line_count, s.percentage) for s in report.languages] == [
            ("Python", 3, 140, 70.0),
            ("Rust", 1, 50, 25.0),
        ]

    def test_unreadable_files_not_in_languages(self):
        files = (_file("big.py", "Python", 0, is_readable=False), _file("a.py", "Python", 4))
        (stat,) = language_stats(files, 4)
        assert stat.file_count == 1
        assert stat.percentage == 100.0

    def test_empty_tree(self):
        report = aggregate("/project", ())
        assert report.total_file_count == 0
        assert report.languages == ()
        assert report.directories == ()
        assert report.average_complexity == 0.0


class TestDirectories:
    def test_top_level_grouping(self):
        report = aggregate("/project", FILES)
        assert [(d.path, d.file_count, d.line_count, d.purpose) for d in report.directories] == [
            (".", 2, 30, "Project root files"),
            ("docs", 1, 0, "Documentation"),
            ("src", 2, 150, "Source code"),
            ("tests", 1, 20, "Tests"),
        ]

    def test_directory_lines_sum_to_total(self):
        report = aggregate("/project", FILES)
        assert sum(d.line_count for d in report.directories) == report.total_line_count

    def test_purpose_from_dominant_language(self):
        members = [_file("crates/a.rs", "Rust", 30), _file("crates/b.py", "Python", 10)]
        assert directory_purpose("crates", members) == "Rust sources"

    def test_purpose_case_insensitive(self):
        assert directory_purpose("Docs") == "Documentation"

    def test_purpose_fallback(self):
        assert directory_purpose("misc", [_file("misc/notes.txt", "Unknown", 3)]) == "Other files"


class TestDependencies:
    def test_last_record_wins(self):
        merged = merge_dependencies(
            [
                _dep("requests", ">=2.0", "pyproject.toml"),
                _dep("requests", "==2.31.0", "requirements.txt"),
            ]
        )
        assert [(d.name, d.version, d.manifest) for d in merged] == [
            ("requests", "==2.31.0", "requirements.txt")
        ]

    def test_pypi_names_normalized(self):
        merged = merge_dependencies([_dep("PyYAML", ">=6", "a.txt"), _dep("pyyaml", "*", "b.txt")])
        assert [(d.name, d.manifest) for d in merged] == [("pyyaml", "b.txt")]

    def test_ecosystems_kept_apart(self):
        merged = merge_dependencies(
            [
                _dep("serde", "1.0", "Cargo.toml", Ecosystem.CARGO),
                _dep("serde", "*", "requirements.txt"),
            ]
        )
        assert [d.ecosystem for d in merged] == [Ecosystem.CARGO, Ecosystem.PYPI]

    def test_other_registries_case_sensitive(self):
        merged = merge_dependencies(
            [_dep("React", "1", "package.json", Ecosystem.NPM), _dep("react", "2", "package.json", Ecosystem.NPM)]
        )
        assert len(merged) == 2


class TestComplexity:
    SCORES = [
        ComplexityScore("a.py", 5, 1, 2, 3),
        ComplexityScore("b.py", 9, 5, 2, 3),
        ComplexityScore("c.py", 5, 1, 2, 3),
    ]

    def test_ranked_descending_with_path_tiebreak(self):
        report = aggregate("/project", (), complexity_scores=self.SCORES)
        assert [s.path for s in report.complexity] == ["b.py", "a.py", "c.py"]

    def test_average(self):
        report = aggregate("/project", (), complexity_scores=self.SCORES)
        assert report.average_complexity == 6.33


class TestSelection:
    def test_unselected_sections_are_empty(self):
        report = aggregate(
            "/project",
            FILES,
            dependency_records=[_dep("requests", "*", "requirements.txt")],
            complexity_scores=TestComplexity.SCORES,
            analyses=["dependencies"],
        )
        assert report.analyses == (AnalysisKind.DEPENDENCIES,)
        assert len(report.dependencies) == 1
        assert report.languages == ()
        assert report.directories == ()
        assert report.complexity == ()
        assert report.average_complexity == 0.0
        # Totals are always reported
        assert report.total_line_count == 200


class TestWarningsAndDeterminism:
    def test_warnings_sorted(self):
        warnings = [
            AnalysisWarning(WarningKind.UNREADABLE_FILE, "z.py", "Cannot read file"),
            AnalysisWarning(WarningKind.SYMLINK_SKIPPED, "a.py", "Symbolic link not followed"),
        ]
        report = aggregate("/project", (), warnings=warnings)
        assert [w.path for w in report.warnings] == ["a.py", "z.py"]

    def test_same_inputs_same_report(self):
        first = aggregate("/project", FILES, complexity_scores=TestComplexity.SCORES)
        second = aggregate("/project", FILES, complexity_scores=TestComplexity.SCORES)
        assert first == second
        assert first.to_dict() == second.to_dict()
