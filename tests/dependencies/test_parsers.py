"""Tests for the individual manifest parsers."""

import json

import pytest

from ricci_analyzer.dependencies import (
    CargoParser,
    ComposerParser,
    GemfileParser,
    GoModParser,
    NpmParser,
    PipfileParser,
    PyprojectParser,
    RequirementsParser,
)
from ricci_analyzer.exceptions import ManifestParseError
from ricci_analyzer.models import DependencyScope, Ecosystem, WarningKind

RUNTIME = DependencyScope.RUNTIME
DEV = DependencyScope.DEV
BUILD = DependencyScope.BUILD
OPTIONAL = DependencyScope.OPTIONAL


def _triples(result):
    return [(r.name, r.version, r.scope) for r in result.records]


class TestCargoParser:
    CONTENT = """\
[package]
name = "demo"
version = "0.1.0"

[dependencies]
serde = "1.0"
tokio = { version = "1", features = ["full"] }
local = { path = "../local" }

[dev-dependencies]
criterion = "0.5"

[build-dependencies]
cc = "1.0"

[target.'cfg(unix)'.dependencies]
libc = "0.2"
"""

    def test_all_sections(self):
        result = CargoParser().parse("Cargo.toml", self.CONTENT)
        assert _triples(result) == [
            ("serde", "1.0", RUNTIME),
            ("tokio", "1", RUNTIME),
            ("local", "*", RUNTIME),
            ("criterion", "0.5", DEV),
            ("cc", "1.0", BUILD),
            ("libc", "0.2", RUNTIME),
        ]
        assert all(r.ecosystem is Ecosystem.CARGO for r in result.records)
        assert all(r.manifest == "Cargo.toml" for r in result.records)
        assert result.warnings == ()

    def test_workspace_dependencies(self):
        content = '[workspace.dependencies]\nanyhow = "1"\n\n[dependencies]\nanyhow = { workspace = true }\n'
        result = CargoParser().parse("Cargo.toml", content)
        assert _triples(result) == [
            ("anyhow", "workspace", RUNTIME),
            ("anyhow", "1", RUNTIME),
        ]

    def test_unsupported_entry_is_malformed(self):
        result = CargoParser().parse("Cargo.toml", "[dependencies]\nodd = 3\nok = \"1\"\n")
        assert _triples(result) == [("ok", "1", RUNTIME)]
        assert [w.kind for w in result.warnings] == [WarningKind.MALFORMED_ENTRY]

    def test_invalid_toml(self):
        with pytest.raises(ManifestParseError):
            CargoParser().parse("Cargo.toml", "[dependencies\nserde = ")


class TestNpmParser:
    def test_sections(self):
        content = json.dumps(
            {
                "name": "web",
                "dependencies": {"express": "^4.18.0"},
                "peerDependencies": {"react": ">=18"},
                "devDependencies": {"jest": "^29.0.0"},
                "optionalDependencies": {"fsevents": "^2.3.0"},
                "scripts": {"test": "jest"},
            }
        )
        result = NpmParser().parse("package.json", content)
        assert _triples(result) == [
            ("express", "^4.18.0", RUNTIME),
            ("react", ">=18", RUNTIME),
            ("jest", "^29.0.0", DEV),
            ("fsevents", "^2.3.0", OPTIONAL),
        ]

    def test_non_string_version(self):
        content = json.dumps({"dependencies": {"a": "1.0.0", "b": {"x": 1}}})
        result = NpmParser().parse("package.json", content)
        assert _triples(result) == [("a", "1.0.0", RUNTIME)]
        assert len(result.warnings) == 1

    def test_invalid_json_reports_line(self):
        with pytest.raises(ManifestParseError) as exc_info:
            NpmParser().parse("package.json", '{\n  "dependencies": {\n    "a": \n}')
        assert exc_info.value.line is not None

    def test_top_level_must_be_object(self):
        with pytest.raises(ManifestParseError):
            NpmParser().parse("package.json", "[]")


class TestPyprojectParser:
    def test_pep621_and_groups(self):
        content = """\
[build-system]
requires = ["setuptools>=61", "wheel"]

[project]
name = "demo"
dependencies = [
    "requests>=2.28",
    "typer[all] >=0.9",
    "tomli; python_version < '3.11'",
]

[project.optional-dependencies]
yaml = ["PyYAML>=6.0"]

[dependency-groups]
test = ["pytest>=7", {include-group = "lint"}]
lint = ["ruff"]
"""
        result = PyprojectParser().parse("pyproject.toml", content)
        assert _triples(result) == [
            ("setuptools", ">=61", BUILD),
            ("wheel", "*", BUILD),
            ("requests", ">=2.28", RUNTIME),
            ("typer", ">=0.9", RUNTIME),
            ("tomli", "*", RUNTIME),
            ("PyYAML", ">=6.0", OPTIONAL),
            ("pytest", ">=7", DEV),
            ("ruff", "*", DEV),
        ]
        assert result.warnings == ()

    def test_poetry_tables(self):
        content = """\
[tool.poetry.dependencies]
python = "^3.10"
httpx = "^0.27"
rich = { version = "^13.0", optional = true }

[tool.poetry.group.dev.dependencies]
black = "^24.0"
"""
        result = PyprojectParser().parse("pyproject.toml", content)
        assert _triples(result) == [
            ("httpx", "^0.27", RUNTIME),
            ("rich", "^13.0", RUNTIME),
            ("black", "^24.0", DEV),
        ]

    def test_dependencies_not_an_array(self):
        result = PyprojectParser().parse("pyproject.toml", '[project]\ndependencies = "requests"\n')
        assert result.records == ()
        assert [w.kind for w in result.warnings] == [WarningKind.MALFORMED_ENTRY]


class TestRequirementsParser:
    CONTENT = """\
# core
requests==2.31.0
Django>=4.2,<5.0  # web
numpy
-r base.txt
--index-url https://example.com/simple
-e ./local
git+https://github.com/x/y.git
./wheels/pkg.whl
pandas>=2.0 \\
    ; python_version >= "3.9"
"""

    def test_requirements(self):
        result = RequirementsParser().parse("requirements.txt", self.CONTENT)
        assert _triples(result) == [
            ("requests", "==2.31.0", RUNTIME),
            ("Django", ">=4.2,<5.0", RUNTIME),
            ("numpy", "*", RUNTIME),
            ("pandas", ">=2.0", RUNTIME),
        ]

    def test_hashed_requirements(self):
        content = (
            "requests==2.31.0 \\\n"
            "    --hash=sha256:abc \\\n"
            "    --hash=sha256:def\n"
            "idna==3.6 --hash=sha256:123\n"
        )
        result = RequirementsParser().parse("requirements.txt", content)
        assert _triples(result) == [
            ("requests", "==2.31.0", RUNTIME),
            ("idna", "==3.6", RUNTIME),
        ]

    @pytest.mark.parametrize(
        "filename,scope",
        [
            ("requirements.txt", RUNTIME),
            ("requirements-dev.txt", DEV),
            ("requirements_test.txt", DEV),
            ("requirements-docs.txt", DEV),
            ("requirements-prod.txt", RUNTIME),
        ],
    )
    def test_scope_from_filename(self, filename, scope):
        result = RequirementsParser().parse(f"app/{filename}", "flask\n")
        assert result.records[0].scope is scope

    def test_matches(self):
        parser = RequirementsParser()
        assert parser.matches("requirements.txt")
        assert parser.matches("requirements-dev.txt")
        assert not parser.matches("requirements.in")
        assert not parser.matches("dev-requirements.cfg")


class TestPipfileParser:
    def test_sections(self):
        content = '[packages]\nflask = "*"\nrequests = {version = ">=2.0"}\n\n[dev-packages]\npytest = "*"\n'
        result = PipfileParser().parse("Pipfile", content)
        assert _triples(result) == [
            ("flask", "*", RUNTIME),
            ("requests", ">=2.0", RUNTIME),
            ("pytest", "*", DEV),
        ]


class TestGoModParser:
    CONTENT = """\
module example.com/app

go 1.21

require github.com/pkg/errors v0.9.1

require (
\tgolang.org/x/sync v0.5.0
\tgithub.com/stretchr/testify v1.8.4 // indirect
)
"""

    def test_single_and_block_requires(self):
        result = GoModParser().parse("go.mod", self.CONTENT)
        assert _triples(result) == [
            ("github.com/pkg/errors", "v0.9.1", RUNTIME),
            ("golang.org/x/sync", "v0.5.0", RUNTIME),
            ("github.com/stretchr/testify", "v1.8.4", RUNTIME),
        ]
        assert all(r.ecosystem is Ecosystem.GO for r in result.records)

    def test_other_blocks_ignored(self):
        content = "module m\n\nreplace (\n\tfoo => ../foo\n)\n"
        assert GoModParser().parse("go.mod", content).records == ()

    def test_malformed_entry(self):
        result = GoModParser().parse("go.mod", "module m\n\nrequire (\n\tbroken\n\tok.io/x v1.0.0\n)\n")
        assert _triples(result) == [("ok.io/x", "v1.0.0", RUNTIME)]
        assert [w.kind for w in result.warnings] == [WarningKind.MALFORMED_ENTRY]
        assert "Line 4" in result.warnings[0].message

    def test_unterminated_block(self):
        with pytest.raises(ManifestParseError) as exc_info:
            GoModParser().parse("go.mod", "module m\n\nrequire (\n\ta v1.0.0\n")
        assert exc_info.value.line == 3


class TestGemfileParser:
    CONTENT = """\
source "https://rubygems.org"

ruby "3.2.2"

gem "rails", "~> 7.1"
gem "pg", ">= 1.1", "< 2.0"
gem "bootsnap", require: false

group :development, :test do
  gem "rspec-rails"
end

gem "rubocop", require: false, group: :development
"""

    def test_gems_and_groups(self):
        result = GemfileParser().parse("Gemfile", self.CONTENT)
        assert _triples(result) == [
            ("rails", "~> 7.1", RUNTIME),
            ("pg", ">= 1.1, < 2.0", RUNTIME),
            ("bootsnap", "*", RUNTIME),
            ("rspec-rails", "*", DEV),
            ("rubocop", "*", DEV),
        ]
        assert result.warnings == ()

    def test_mixed_group_is_runtime(self):
        content = "group :production, :development do\n  gem 'puma'\nend\n"
        result = GemfileParser().parse("Gemfile", content)
        assert _triples(result) == [("puma", "*", RUNTIME)]

    def test_conditional_inside_group(self):
        content = (
            "group :development do\n"
            "  if ENV[\"X\"]\n"
            "    gem \"foo\"\n"
            "  end\n"
            "  gem \"bar\"\n"
            "end\n"
            "gem \"rack\"\n"
        )
        result = GemfileParser().parse("Gemfile", content)
        assert _triples(result) == [("foo", "*", DEV), ("bar", "*", DEV), ("rack", "*", RUNTIME)]

    def test_unrecognized_declaration(self):
        result = GemfileParser().parse("Gemfile", "gem name_from_variable\n")
        assert result.records == ()
        assert [w.kind for w in result.warnings] == [WarningKind.MALFORMED_ENTRY]


class TestComposerParser:
    def test_platform_requirements_skipped(self):
        content = json.dumps(
            {
                "require": {"php": ">=8.1", "ext-json": "*", "monolog/monolog": "^3.0"},
                "require-dev": {"phpunit/phpunit": "^10.0"},
            }
        )
        result = ComposerParser().parse("composer.json", content)
        assert _triples(result) == [
            ("monolog/monolog", "^3.0", RUNTIME),
            ("phpunit/phpunit", "^10.0", DEV),
        ]
        assert all(r.ecosystem is Ecosystem.PACKAGIST for r in result.records)
