"""Human-readable text formatter built on rich tables."""

from io import StringIO

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import AnalysisKind, AnalysisReport, DependencyScope, Severity
from .base import BaseFormatter

# A file counts as "complex" above either limit.
COMPLEX_SCORE = 10
COMPLEX_LINES = 500

_SEVERITY_STYLE = {
    Severity.HIGH: "[red bold]high[/red bold]",
    Severity.MEDIUM: "[yellow]medium[/yellow]",
    Severity.LOW: "[green]low[/green]",
}


class TextFormatter(BaseFormatter):
    """Summary line plus one table per selected analysis."""

    def __init__(self, width: int = 110, max_rows: int = 20, color: bool = False):
        self.width = width
        self.max_rows = max_rows
        self.color = color

    def format(self, report: AnalysisReport) -> str:
        buffer = StringIO()
        console = Console(
            file=buffer,
            width=self.width,
            force_terminal=self.color,
            no_color=not self.color,
            highlight=False,
        )

        console.print(f"[bold cyan]Project:[/bold cyan] {escape(report.root)}")
        console.print(
            f"{report.total_file_count} files, {report.total_line_count} lines "
            f"({', '.join(kind.value for kind in report.analyses)})"
        )

        kinds = set(report.analyses)
        if AnalysisKind.STRUCTURE in kinds:
            self._languages(console, report)
            self._directories(console, report)
        if AnalysisKind.DEPENDENCIES in kinds:
            self._dependencies(console, report)
        if AnalysisKind.COMPLEXITY in kinds:
            self._complexity(console, report)
        if AnalysisKind.SMELLS in kinds:
            self._smells(console, report)
        if report.warnings:
            self._warnings(console, report)

        return buffer.getvalue()

    def _languages(self, console: Console, report: AnalysisReport) -> None:
        console.print()
        if not report.languages:
            console.print("[bold]Languages:[/bold] none detected")
            return
        table = Table(title="Languages", title_justify="left")
        table.add_column("Language")
        table.add_column("Files", justify="right")
        table.add_column("Lines", justify="right")
        table.add_column("%", justify="right")
        for stat in report.languages:
            table.add_row(
                escape(stat.language),
                str(stat.file_count),
                str(stat.line_count),
                f"{stat.percentage:.2f}",
            )
        console.print(table)

    def _directories(self, console: Console, report: AnalysisReport) -> None:
        if not report.directories:
            return
        console.print()
        table = Table(title="Directories", title_justify="left")
        table.add_column("Directory")
        table.add_column("Files", justify="right")
        table.add_column("Lines", justify="right")
        table.add_column("Purpose")
        for summary in report.directories:
            table.add_row(
                escape(summary.path),
                str(summary.file_count),
                str(summary.line_count),
                escape(summary.purpose),
            )
        console.print(table)

    def _dependencies(self, console: Console, report: AnalysisReport) -> None:
        console.print()
        dev = len(report.dev_dependencies)
        console.print(
            f"[bold]Dependencies:[/bold] {len(report.dependencies)} "
            f"(direct {len(report.dependencies) - dev} | dev {dev})"
        )
        if not report.dependencies:
            return
        table = Table()
        table.add_column("Ecosystem")
        table.add_column("Name")
        table.add_column("Version")
        table.add_column("Scope")
        table.add_column("Manifest")
        for dep in report.dependencies:
            scope = dep.scope.value
            if dep.scope is DependencyScope.DEV:
                scope = f"[dim]{scope}[/dim]"
            table.add_row(
                dep.ecosystem.value, escape(dep.name), escape(dep.version), scope, escape(dep.manifest)
            )
        console.print(table)

    def _complexity(self, console: Console, report: AnalysisReport) -> None:
        console.print()
        complex_files = [
            s for s in report.complexity if s.score > COMPLEX_SCORE or s.line_count > COMPLEX_LINES
        ]
        console.print(
            f"[bold]Complexity:[/bold] average {report.average_complexity:.2f}, "
            f"{len(complex_files)} complex files"
        )
        if not report.complexity:
            return
        table = Table()
        table.add_column("File")
        table.add_column("Score", justify="right")
        table.add_column("Branches", justify="right")
        table.add_column("Depth", justify="right")
        table.add_column("Longest fn", justify="right")
        for entry in report.complexity[: self.max_rows]:
            table.add_row(
                escape(entry.path),
                str(entry.score),
                str(entry.branch_count),
                str(entry.max_nesting_depth),
                str(entry.longest_function_lines),
            )
        console.print(table)
        self._truncated(console, len(report.complexity))

    def _smells(self, console: Console, report: AnalysisReport) -> None:
        console.print()
        console.print(f"[bold]Smells:[/bold] {len(report.smells)}")
        if not report.smells:
            return
        table = Table()
        table.add_column("Severity")
        table.add_column("Kind")
        table.add_column("Location")
        table.add_column("Why")
        for smell in report.smells[: self.max_rows]:
            location = f"{smell.path}:{smell.start_line}"
            if smell.end_line != smell.start_line:
                location += f"-{smell.end_line}"
            table.add_row(
                _SEVERITY_STYLE[smell.severity],
                smell.kind.value,
                escape(location),
                escape(smell.rationale),
            )
        console.print(table)
        self._truncated(console, len(report.smells))

    def _warnings(self, console: Console, report: AnalysisReport) -> None:
        console.print()
        console.print(f"[bold yellow]Warnings:[/bold yellow] {len(report.warnings)}")
        for warning in report.warnings:
            console.print(f"  {warning.kind.value}: {escape(warning.path)} - {escape(warning.message)}")

    def _truncated(self, console: Console, total: int) -> None:
        if total > self.max_rows:
            console.print(f"[dim]... {total - self.max_rows} more[/dim]")
