"""The analyze command."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from ..analysis import AnalysisEngine
from ..exceptions import RicciAnalyzerError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from . import app
from ._common import console, resolve_config


class AnalysisChoice(str, Enum):
    ALL = "all"
    STRUCTURE = "structure"
    DEPENDENCIES = "dependencies"
    COMPLEXITY = "complexity"
    SMELLS = "smells"


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


@app.command()
def analyze(
    path: Path = typer.Argument(
        Path("."),
        help="Project root to analyze (default: current directory)",
    ),
    analysis_types: Optional[List[AnalysisChoice]] = typer.Option(
        None,
        "-t",
        "--type",
        help="Analysis to run; repeat for several (default: all)",
        case_sensitive=False,
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TEXT,
        "-f",
        "--format",
        help="Output format",
        case_sensitive=False,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect)",
        min=1,
        max=64,
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "-e",
        "--exclude",
        help="Directory name to skip; repeatable",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "-o",
        "--output",
        help="Write the report to a file instead of stdout",
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file",
        dir_okay=False,
    ),
) -> None:
    """
    Analyze a project: languages, dependencies, complexity and code smells.

    [bold cyan]Examples:[/bold cyan]

      ricci-analyzer analyze

      ricci-analyzer analyze ./my-project -f json

      ricci-analyzer analyze -t dependencies -t complexity -f yaml -o report.yaml
    """
    logger = setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)
    selected = [choice.value for choice in analysis_types] if analysis_types else None

    try:
        settings = resolve_config(
            config=config,
            workers=workers,
            exclude=exclude,
            verbose=verbose,
            quiet=quiet,
        )
        report = AnalysisEngine(path, config=settings, analyses=selected).run()
        rendered = get_formatter(output_format.value).format(report)

        if output is not None:
            output.write_text(rendered, encoding="utf-8")
            if not quiet:
                console.print(f"Report written to [bold]{output}[/bold]")
        else:
            typer.echo(rendered.rstrip("\n"))

    except RicciAnalyzerError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    except OSError as e:
        logger.error(f"Cannot write report: {e}")
        console.print(f"[red]Error:[/red] cannot write report: {e}")
        raise typer.Exit(1)
