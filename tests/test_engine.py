"""End-to-end tests for AnalysisEngine and the public analyze() API."""

from pathlib import Path

import pytest

from ricci_analyzer import AnalysisConfig, AnalysisKind, analyze
from ricci_analyzer.analysis import AnalysisEngine, normalize_analyses
from ricci_analyzer.exceptions import PathNotFoundError
from ricci_analyzer.models import ALL_ANALYSES, DependencyScope, SmellKind, WarningKind

SEQUENTIAL = AnalysisConfig(workers=1)


def _run(root, config=SEQUENTIAL, analyses=None):
    return AnalysisEngine(root, config=config, analyses=analyses).run()


class TestNormalizeAnalyses:
    def test_defaults_to_everything(self):
        assert normalize_analyses(None) == ALL_ANALYSES
        assert normalize_analyses([]) == ALL_ANALYSES
        assert normalize_analyses(["complexity", "all"]) == ALL_ANALYSES

    def test_canonical_order(self):
        assert normalize_analyses(["smells", "structure"]) == (
            AnalysisKind.STRUCTURE,
            AnalysisKind.SMELLS,
        )

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            normalize_analyses(["security"])


class TestComplexityScenario:
    def test_long_rust_function(self, make_tree):
        source = "fn main() {\n" + "    let x = 1;\n" * 118 + "}\n"
        report = _run(make_tree({"src/main.rs": source}))
        (entry,) = report.complexity
        assert entry.path == "src/main.rs"
        assert entry.line_count == 120
        assert entry.score == 72
        assert report.average_complexity == 72.0

    def test_flat_file_scores_zero(self, make_tree):
        report = _run(make_tree({"consts.rs": "const A: u32 = 1;\nconst B: u32 = 2;\n"}))
        assert report.complexity[0].score == 0


class TestDependencyScenario:
    def test_later_manifest_wins(self, make_tree):
        root = make_tree(
            {
                "pyproject.toml": '[project]\nname = "demo"\ndependencies = ["requests>=2.0"]\n',
                "requirements.txt": "requests==2.31.0\n",
            }
        )
        (dep,) = _run(root).dependencies
        assert (dep.version, dep.manifest) == ("==2.31.0", "requirements.txt")

    def test_traversal_order_decides(self, make_tree):
        root = make_tree(
            {
                "a/requirements.txt": "requests==2.31.0\n",
                "b/pyproject.toml": '[project]\nname = "demo"\ndependencies = ["requests>=2.0"]\n',
            }
        )
        (dep,) = _run(root).dependencies
        assert (dep.version, dep.manifest) == (">=2.0", "b/pyproject.toml")

    def test_invalid_manifest_warns(self, make_tree):
        root = make_tree({"package.json": "{ nope", "index.js": "console.log(1);\n"})
        report = _run(root)
        assert report.dependencies == ()
        assert [(w.kind, w.path) for w in report.warnings] == [
            (WarningKind.MANIFEST_PARSE_ERROR, "package.json")
        ]
        assert report.total_file_count == 2

    def test_dev_dependencies(self, make_tree):
        root = make_tree({"requirements-dev.txt": "pytest\n", "requirements.txt": "flask\n"})
        report = _run(root)
        assert [d.name for d in report.dev_dependencies] == ["pytest"]
        assert {d.scope for d in report.dependencies} == {DependencyScope.DEV, DependencyScope.RUNTIME}


class TestSmellScenario:
    def test_long_parameter_list(self, make_tree):
        source = "def configure(a, b, c, d, e, f, g):\n    setup = (a, b, c, d, e, f, g)\n    return setup\n"
        report = _run(make_tree({"app/settings.py": source}))
        (smell,) = report.smells
        assert smell.kind is SmellKind.LONG_PARAMETER_LIST
        assert (smell.path, smell.start_line, smell.end_line) == ("app/settings.py", 1, 3)
        assert report.smells_for("app/settings.py") == report.smells


class TestFileHandling:
    def test_binary_counted_but_not_measured(self, make_tree):
        root = make_tree({"data.bin": b"\x00\x01\x02\x03" * 64, "main.py": "print(1)\n"})
        report = _run(root)
        assert report.total_file_count == 2
        assert report.total_line_count == 1
        assert [s.path for s in report.complexity] == ["main.py"]
        binary = next(f for f in report.files if f.relative_path == "data.bin")
        assert binary.is_binary and binary.line_count == 0

    def test_shebang_classification(self, make_tree):
        root = make_tree({"bin/tool": "#!/usr/bin/env python3\nprint('hi')\n"})
        (stat,) = _run(root).languages
        assert stat.language == "Python"

    def test_bom_and_crlf(self, make_tree):
        root = make_tree({"win.py": "\ufeffx = 1\r\ny = 2\r\n"})
        assert _run(root).total_line_count == 2

    def test_oversized_file(self, make_tree):
        root = make_tree({"big.py": "x = 1\n" * 10, "small.txt": ""})
        report = _run(root, AnalysisConfig(workers=1, max_file_size_mb=0.00001))
        big = next(f for f in report.files if f.relative_path == "big.py")
        assert not big.is_readable
        assert big.line_count == 0
        assert [(w.kind, w.path) for w in report.warnings] == [(WarningKind.FILE_TOO_LARGE, "big.py")]
        assert report.complexity == ()

    def test_unreadable_file(self, make_tree, monkeypatch):
        root = make_tree({"secret.py": "x = 1\n", "main.py": "print(1)\n"})
        original = Path.read_bytes

        def read_bytes(self):
            if self.name == "secret.py":
                raise PermissionError(13, "Permission denied")
            return original(self)

        monkeypatch.setattr(Path, "read_bytes", read_bytes)
        report = _run(root)
        assert report.total_file_count == 2
        assert report.total_line_count == 1
        secret = next(f for f in report.files if f.relative_path == "secret.py")
        assert not secret.is_readable
        assert secret.line_count == 0
        assert [(w.kind, w.path, w.message) for w in report.warnings] == [
            (WarningKind.UNREADABLE_FILE, "secret.py", "Cannot read file: Permission denied")
        ]
        assert [s.path for s in report.complexity] == ["main.py"]

    def test_unknown_language_not_scored(self, make_tree):
        report = _run(make_tree({"notes.md": "# Notes\nif while for\n"}))
        assert report.total_line_count == 2
        assert report.complexity == ()
        assert report.smells == ()
        assert report.languages == ()

    def test_empty_directory(self, tmp_path):
        report = _run(tmp_path)
        assert report.total_file_count == 0
        assert report.total_line_count == 0
        assert report.average_complexity == 0.0


class TestRunProperties:
    def test_missing_root(self, tmp_path):
        with pytest.raises(PathNotFoundError):
            _run(tmp_path / "nope")

    def test_line_total_is_sum_of_files(self, make_tree):
        root = make_tree({"a.py": "a = 1\n", "b/c.rs": "fn c() {}\n\n", "d.txt": "x"})
        report = _run(root)
        assert report.total_line_count == sum(f.line_count for f in report.files) == 4

    def test_idempotent(self, make_tree):
        root = make_tree({"a.py": "def f(x):\n    if x:\n        return 1\n", "Cargo.toml": '[dependencies]\nserde = "1"\n'})
        assert _run(root) == _run(root)

    def test_parallel_matches_sequential(self, make_tree):
        files = {
            f"pkg{i % 3}/mod{i}.py": f"def f{i}(a, b):\n    if a > {i + 40}:\n        return b\n    return a\n"
            for i in range(15)
        }
        files["requirements.txt"] = "requests\n"
        root = make_tree(files)
        sequential = _run(root, AnalysisConfig(workers=1))
        parallel = _run(root, AnalysisConfig(workers=4))
        assert parallel == sequential
        assert parallel.to_dict() == sequential.to_dict()

    def test_analysis_selection(self, make_tree):
        root = make_tree({"a.py": "def f(x):\n    return x\n", "requirements.txt": "flask\n"})
        report = _run(root, analyses=["dependencies"])
        assert report.analyses == (AnalysisKind.DEPENDENCIES,)
        assert [d.name for d in report.dependencies] == ["flask"]
        assert report.complexity == ()
        assert report.smells == ()
        assert report.languages == ()


class TestAnalyzeApi:
    def test_explicit_config(self, make_tree):
        root = make_tree({"main.go": "package main\n\nfunc main() {\n}\n"})
        report = analyze(root, config=SEQUENTIAL)
        assert report.root == str(root)
        assert report.languages[0].language == "Go"

    def test_overrides_use_discovery(self, make_tree, isolated_config):
        root = make_tree({"a.py": "x = 1\n"})
        report = analyze(root, analyses=["structure"], workers=1)
        assert report.total_line_count == 1

    def test_config_and_overrides_conflict(self, tmp_path):
        with pytest.raises(ValueError):
            analyze(tmp_path, config=SEQUENTIAL, workers=2)
