"""Manifest parsers, one per manifest kind.

Every parser turns manifest text into a ``ManifestResult``. A manifest that
cannot be parsed at all raises ``ManifestParseError``; a single bad entry is
skipped and reported as a ``malformed_entry`` warning instead.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Optional

from ..config import load_toml_module
from ..exceptions import ManifestParseError
from ..models import AnalysisWarning, DependencyRecord, DependencyScope, Ecosystem, WarningKind

ANY_VERSION = "*"

# PEP 508: name, optional extras, then version specifier / URL, then markers.
_PEP508 = re.compile(r"^\s*([A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)\s*(\[[^\]]*\])?\s*(.*)$")


@dataclass(frozen=True)
class ManifestResult:
    """Records and entry-level warnings from one manifest."""

    records: tuple[DependencyRecord, ...] = ()
    warnings: tuple[AnalysisWarning, ...] = ()


class _Collector:
    """Accumulates records and warnings while a parser walks a manifest."""

    def __init__(self, manifest: str, ecosystem: Ecosystem):
        self.manifest = manifest
        self.ecosystem = ecosystem
        self.records: list[DependencyRecord] = []
        self.warnings: list[AnalysisWarning] = []

    def add(self, name: str, version: Optional[str], scope: DependencyScope) -> None:
        version = (version or "").strip() or ANY_VERSION
        self.records.append(
            DependencyRecord(
                manifest=self.manifest,
                name=name,
                version=version,
                ecosystem=self.ecosystem,
                scope=scope,
            )
        )

    def malformed(self, message: str) -> None:
        self.warnings.append(
            AnalysisWarning(kind=WarningKind.MALFORMED_ENTRY, path=self.manifest, message=message)
        )

    def result(self) -> ManifestResult:
        return ManifestResult(records=tuple(self.records), warnings=tuple(self.warnings))


class ManifestParser(ABC):
    """Base class for manifest parsers."""

    ecosystem: Ecosystem
    filenames: tuple[str, ...] = ()

    def matches(self, filename: str) -> bool:
        return filename in self.filenames

    @abstractmethod
    def parse(self, manifest: str, content: str) -> ManifestResult:
        """
        Parse manifest text.

        Args:
            manifest: Relative path of the manifest (recorded on each record)
            content: Manifest text

        Raises:
            ManifestParseError: If the manifest is syntactically invalid
        """

    def _collector(self, manifest: str) -> _Collector:
        return _Collector(manifest, self.ecosystem)


# ── Format helpers ─────────────────────────────────────────────────


def _load_toml(manifest: str, content: str) -> dict[str, Any]:
    tomllib = load_toml_module()
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(manifest, str(e))


def _load_json_object(manifest: str, content: str) -> dict[str, Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError(manifest, e.msg, line=e.lineno)
    if not isinstance(data, dict):
        raise ManifestParseError(manifest, "Top-level value is not an object")
    return data


def _table(data: dict[str, Any], *keys: str) -> Any:
    """Follow nested keys, returning None when any level is missing."""
    node: Any = data
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _add_pep508(collector: _Collector, requirement: Any, scope: DependencyScope) -> None:
    if not isinstance(requirement, str):
        collector.malformed(f"Requirement is not a string: {requirement!r}")
        return
    match = _PEP508.match(requirement)
    if not match:
        collector.malformed(f"Unparseable requirement: {requirement!r}")
        return
    spec = match.group(3).split(";", 1)[0].strip()
    if spec.startswith("(") and spec.endswith(")"):
        spec = spec[1:-1].strip()
    collector.add(match.group(1), spec, scope)


def _add_table_entries(
    collector: _Collector, section: Any, scope: DependencyScope, label: str
) -> None:
    """Add entries of a name -> version-or-table mapping (Cargo, Poetry, Pipfile)."""
    if section is None:
        return
    if not isinstance(section, dict):
        collector.malformed(f"Section '{label}' is not a table")
        return
    for name, spec in section.items():
        version = _table_version(spec)
        if version is None:
            collector.malformed(f"Unsupported entry for '{name}' in '{label}'")
            continue
        collector.add(name, version, scope)


def _table_version(spec: Any) -> Optional[str]:
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        if spec.get("workspace") is True:
            return "workspace"
        version = spec.get("version")
        return str(version) if version is not None else ANY_VERSION
    if isinstance(spec, list):
        versions = [_table_version(item) for item in spec]
        if any(v is None for v in versions):
            return None
        return ", ".join(versions)
    return None


# ── Parsers ────────────────────────────────────────────────────────


class CargoParser(ManifestParser):
    """Cargo.toml: [dependencies], [dev-dependencies], [build-dependencies],
    their [target.*] variants, and [workspace.dependencies]."""

    ecosystem = Ecosystem.CARGO
    filenames = ("Cargo.toml",)

    _SECTIONS = (
        ("dependencies", DependencyScope.RUNTIME),
        ("dev-dependencies", DependencyScope.DEV),
        ("build-dependencies", DependencyScope.BUILD),
    )

    def parse(self, manifest: str, content: str) -> ManifestResult:
        data = _load_toml(manifest, content)
        collector = self._collector(manifest)

        for key, scope in self._SECTIONS:
            _add_table_entries(collector, data.get(key), scope, key)

        targets = data.get("target")
        if isinstance(targets, dict):
            for target, tables in targets.items():
                for key, scope in self._SECTIONS:
                    label = f"target.{target}.{key}"
                    _add_table_entries(collector, _table(tables, key), scope, label)

        _add_table_entries(
            collector,
            _table(data, "workspace", "dependencies"),
            DependencyScope.RUNTIME,
            "workspace.dependencies",
        )
        return collector.result()


class NpmParser(ManifestParser):
    """package.json dependency maps."""

    ecosystem = Ecosystem.NPM
    filenames = ("package.json",)

    _SECTIONS = (
        ("dependencies", DependencyScope.RUNTIME),
        ("peerDependencies", DependencyScope.RUNTIME),
        ("devDependencies", DependencyScope.DEV),
        ("optionalDependencies", DependencyScope.OPTIONAL),
    )

    def parse(self, manifest: str, content: str) -> ManifestResult:
        data = _load_json_object(manifest, content)
        collector = self._collector(manifest)
        for key, scope in self._SECTIONS:
            _add_string_map(collector, data.get(key), scope, key)
        return collector.result()


def _add_string_map(collector: _Collector, section: Any, scope: DependencyScope, label: str) -> None:
    """Add entries of a JSON name -> version-string map (npm, Composer)."""
    if section is None:
        return
    if not isinstance(section, dict):
        collector.malformed(f"Section '{label}' is not an object")
        return
    for name, version in section.items():
        if not isinstance(version, str):
            collector.malformed(f"Version of '{name}' in '{label}' is not a string")
            continue
        collector.add(name, version, scope)


class PyprojectParser(ManifestParser):
    """pyproject.toml: PEP 621 metadata, PEP 735 groups, Poetry tables and
    build-system requirements."""

    ecosystem = Ecosystem.PYPI
    filenames = ("pyproject.toml",)

    def parse(self, manifest: str, content: str) -> ManifestResult:
        data = _load_toml(manifest, content)
        collector = self._collector(manifest)

        build = _table(data, "build-system", "requires")
        for requirement in _list_section(collector, build, "build-system.requires"):
            _add_pep508(collector, requirement, DependencyScope.BUILD)

        runtime = _table(data, "project", "dependencies")
        for requirement in _list_section(collector, runtime, "project.dependencies"):
            _add_pep508(collector, requirement, DependencyScope.RUNTIME)

        extras = _table(data, "project", "optional-dependencies")
        for extra, requirements in _dict_section(collector, extras, "optional-dependencies"):
            label = f"optional-dependencies.{extra}"
            for requirement in _list_section(collector, requirements, label):
                _add_pep508(collector, requirement, DependencyScope.OPTIONAL)

        groups = data.get("dependency-groups")
        for group, requirements in _dict_section(collector, groups, "dependency-groups"):
            label = f"dependency-groups.{group}"
            for requirement in _list_section(collector, requirements, label):
                # Group includes ({include-group = "..."}) are not dependencies
                if isinstance(requirement, dict) and "include-group" in requirement:
                    continue
                _add_pep508(collector, requirement, DependencyScope.DEV)

        poetry = _table(data, "tool", "poetry")
        if isinstance(poetry, dict):
            self._parse_poetry(collector, poetry)

        return collector.result()

    @staticmethod
    def _parse_poetry(collector: _Collector, poetry: dict[str, Any]) -> None:
        runtime = poetry.get("dependencies")
        if isinstance(runtime, dict):
            # The interpreter constraint is not a package
            runtime = {k: v for k, v in runtime.items() if k.lower() != "python"}
        _add_table_entries(collector, runtime, DependencyScope.RUNTIME, "tool.poetry.dependencies")
        _add_table_entries(
            collector, poetry.get("dev-dependencies"), DependencyScope.DEV, "tool.poetry.dev-dependencies"
        )
        for group, tables in _dict_section(collector, poetry.get("group"), "tool.poetry.group"):
            scope = DependencyScope.RUNTIME if group == "main" else DependencyScope.DEV
            _add_table_entries(
                collector, _table(tables, "dependencies"), scope, f"tool.poetry.group.{group}.dependencies"
            )


def _list_section(collector: _Collector, value: Any, label: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        collector.malformed(f"'{label}' is not an array")
        return []
    return value


def _dict_section(collector: _Collector, value: Any, label: str) -> list:
    if value is None:
        return []
    if not isinstance(value, dict):
        collector.malformed(f"'{label}' is not a table")
        return []
    return list(value.items())


class RequirementsParser(ManifestParser):
    """requirements*.txt files, one PEP 508 requirement per line.

    Options (``-r``, ``-e``, ``--index-url``...), comments, and bare URLs or
    local paths are ignored. A file whose name mentions dev, test, lint or
    docs is treated as development-only.
    """

    ecosystem = Ecosystem.PYPI

    _DEV_HINTS = ("dev", "test", "lint", "doc")

    def matches(self, filename: str) -> bool:
        return filename.startswith("requirements") and filename.endswith(".txt")

    def parse(self, manifest: str, content: str) -> ManifestResult:
        collector = self._collector(manifest)
        stem = PurePosixPath(manifest).stem.lower()
        scope = DependencyScope.DEV if any(h in stem for h in self._DEV_HINTS) else DependencyScope.RUNTIME

        for line in _joined_lines(content):
            line = re.sub(r"(^|\s)#.*$", "", line).strip()
            # Drop per-requirement options such as --hash
            line = re.split(r"\s--?[A-Za-z]", line, maxsplit=1)[0].strip()
            if not line or line.startswith("-"):
                continue
            if "://" in line and " @ " not in line and "@" not in line.split("://", 1)[0]:
                continue
            if line.startswith((".", "/")):
                continue
            _add_pep508(collector, line, scope)
        return collector.result()


def _joined_lines(content: str) -> list[str]:
    """Split into logical lines, honouring trailing-backslash continuations."""
    lines: list[str] = []
    pending = ""
    for raw in content.splitlines():
        if raw.rstrip().endswith("\\"):
            pending += raw.rstrip()[:-1] + " "
            continue
        lines.append(pending + raw)
        pending = ""
    if pending:
        lines.append(pending)
    return lines


class PipfileParser(ManifestParser):
    """Pipfile: [packages] and [dev-packages]."""

    ecosystem = Ecosystem.PYPI
    filenames = ("Pipfile",)

    def parse(self, manifest: str, content: str) -> ManifestResult:
        data = _load_toml(manifest, content)
        collector = self._collector(manifest)
        _add_table_entries(collector, data.get("packages"), DependencyScope.RUNTIME, "packages")
        _add_table_entries(collector, data.get("dev-packages"), DependencyScope.DEV, "dev-packages")
        return collector.result()


class GoModParser(ManifestParser):
    """go.mod ``require`` directives, single-line and block form.

    Requirements marked ``// indirect`` are kept.
    """

    ecosystem = Ecosystem.GO
    filenames = ("go.mod",)

    _BLOCK_START = re.compile(r"^(\w+)\s*\($")

    def parse(self, manifest: str, content: str) -> ManifestResult:
        collector = self._collector(manifest)
        block: Optional[str] = None
        block_line = 0

        for lineno, raw in enumerate(content.splitlines(), start=1):
            line = raw.split("//", 1)[0].strip()
            if not line:
                continue

            if block is not None:
                if line == ")":
                    block = None
                elif block == "require":
                    self._add_requirement(collector, line, lineno)
                continue

            start = self._BLOCK_START.match(line)
            if start:
                block = start.group(1)
                block_line = lineno
                continue

            directive, _, rest = line.partition(" ")
            if directive == "require":
                self._add_requirement(collector, rest.strip(), lineno)

        if block is not None:
            raise ManifestParseError(manifest, f"Unterminated '{block}' block", line=block_line)
        return collector.result()

    @staticmethod
    def _add_requirement(collector: _Collector, text: str, lineno: int) -> None:
        parts = text.split()
        if len(parts) != 2:
            collector.malformed(f"Line {lineno}: expected 'module version', got {text!r}")
            return
        collector.add(parts[0], parts[1], DependencyScope.RUNTIME)


class GemfileParser(ManifestParser):
    """Gemfile ``gem`` declarations.

    Gems inside ``group :development`` / ``group :test`` blocks, or declared
    with a ``group:``/``groups:`` option naming them, are development-only.
    """

    ecosystem = Ecosystem.RUBYGEMS
    filenames = ("Gemfile",)

    _GEM = re.compile(r"""^gem\s*\(?\s*(["'])([^"']+)\1(.*)$""")
    _GROUP_BLOCK = re.compile(r"^group\s*\(?(.*?)\)?\s+do\b")
    _BLOCK_OPEN = re.compile(r"\bdo\b(\s*\|[^|]*\|)?\s*$")
    _BLOCK_KEYWORD = re.compile(r"^(?:if|unless|case|begin|while|until)\b")
    _STRING = re.compile(r"""(["'])([^"']*)\1""")
    _SYMBOL = re.compile(r":(\w+)|(\w+):")
    _OPTION = re.compile(r"\b\w+:\s|=>")
    _DEV_GROUPS = frozenset({"development", "test"})

    def parse(self, manifest: str, content: str) -> ManifestResult:
        collector = self._collector(manifest)
        # One entry per open block: the set of group names, or None for
        # blocks that are not groups (platforms, source, if/unless, ...).
        blocks: list[Optional[frozenset[str]]] = []

        for lineno, raw in enumerate(content.splitlines(), start=1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue

            group = self._GROUP_BLOCK.match(line)
            if group:
                blocks.append(frozenset(self._symbols(group.group(1))))
                continue
            if line == "end":
                if blocks:
                    blocks.pop()
                continue
            if self._BLOCK_KEYWORD.match(line) or (
                self._BLOCK_OPEN.search(line) and not line.startswith("gem")
            ):
                blocks.append(None)
                continue
            if not re.match(r"gem\b", line):
                continue

            gem = self._GEM.match(line)
            if not gem:
                collector.malformed(f"Line {lineno}: unrecognized gem declaration {line!r}")
                continue

            name, rest = gem.group(2), gem.group(3)
            option = self._OPTION.search(rest)
            constraints_text = rest[: option.start()] if option else rest
            constraints = [m.group(2) for m in self._STRING.finditer(constraints_text)]

            groups: set[str] = set()
            for names in blocks:
                if names:
                    groups |= names
            if option:
                inline = re.search(r"\bgroups?:\s*(.*)$|:groups?\s*=>\s*(.*)$", rest)
                if inline:
                    groups |= set(self._symbols(inline.group(1) or inline.group(2)))

            scope = DependencyScope.DEV if groups and groups <= self._DEV_GROUPS else DependencyScope.RUNTIME
            collector.add(name, ", ".join(constraints), scope)

        return collector.result()

    def _symbols(self, text: str) -> list[str]:
        return [a or b for a, b in self._SYMBOL.findall(text)] + [
            m.group(2) for m in self._STRING.finditer(text)
        ]


class ComposerParser(ManifestParser):
    """composer.json ``require`` and ``require-dev``.

    Platform requirements (php, hhvm, ext-*, lib-*, composer-*) are not
    packages and are skipped.
    """

    ecosystem = Ecosystem.PACKAGIST
    filenames = ("composer.json",)

    _PLATFORM = re.compile(r"^(?:php(?:-64bit)?|hhvm|ext-.+|lib-.+|composer(?:-.+)?)$")

    def parse(self, manifest: str, content: str) -> ManifestResult:
        data = _load_json_object(manifest, content)
        collector = self._collector(manifest)
        for key, scope in (("require", DependencyScope.RUNTIME), ("require-dev", DependencyScope.DEV)):
            section = data.get(key)
            if isinstance(section, dict):
                section = {k: v for k, v in section.items() if not self._PLATFORM.match(k)}
            _add_string_map(collector, section, scope, key)
        return collector.result()


def get_default_parsers() -> list[ManifestParser]:
    """Return one instance of every manifest parser."""
    return [
        CargoParser(),
        NpmParser(),
        PyprojectParser(),
        RequirementsParser(),
        PipfileParser(),
        GoModParser(),
        GemfileParser(),
        ComposerParser(),
    ]
