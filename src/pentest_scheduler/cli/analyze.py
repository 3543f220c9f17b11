"""Main analysis command."""

from pathlib import Path
from typing import Optional

import typer
from rich.text import Text

from ..config import AnalysisConfig, format_period, load_config
from ..exceptions import InvalidPathError, PentestSchedulerError
from ..formatters import OutputFormat, get_formatter
from ..logging_config import setup_logging
from ..models import AnalysisRun, Priority
from ..pipeline import analyze_repositories
from . import app
from ._common import console, err_console

TITLE = "Pentest Scheduler - Repository Change Analysis"


@app.command()
def analyze(
    directory: Optional[Path] = typer.Option(
        None,
        "--dir",
        "-d",
        help="Directory containing git repositories (default: current directory)",
    ),
    period: Optional[str] = typer.Option(
        None,
        "--period",
        "-p",
        help="Time period to analyze: 1m, 3m, 6m, 1y, 2y or a duration like 720h (default: 6m)",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        "-f",
        help="Output format",
        case_sensitive=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write results to this file instead of stdout",
        dir_okay=False,
    ),
    min_change: Optional[float] = typer.Option(
        None,
        "--min-change",
        help="Minimum change percentage to include",
        min=0.0,
    ),
    include_inactive: Optional[bool] = typer.Option(
        None,
        "--include-inactive/--exclude-inactive",
        help="Include repositories with no commits in the period",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Repositories analyzed in parallel (default: auto-detect)",
        min=1,
        max=64,
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before a single git command is abandoned",
        min=0.1,
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
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log progress for every repository",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print the results",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append log records to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Rank git repositories by recent change activity for pentest scheduling.

    Every repository below the directory gets a risk score (0-100) built from
    its change percentage, commit count and last-commit recency, and a
    HIGH / MEDIUM / LOW priority.

    [bold cyan]Examples:[/bold cyan]

      pentest-scheduler --dir ~/dev --period 6m

      pentest-scheduler -d /path/to/repos -p 1y -f json -o results.json

      pentest-scheduler -d . -p 3m --min-change 5.0 --verbose
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]Pentest Scheduler[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    log_path = str(log_file) if log_file is not None else None
    logger = setup_logging(verbose=verbose, quiet=quiet, log_file=log_path)

    try:
        settings = load_config(
            config_file=config,
            root_dir=directory,
            period=period,
            min_change_threshold=min_change,
            include_inactive=include_inactive,
            workers=workers,
            oracle_timeout_seconds=timeout,
            verbose=verbose,
            quiet=quiet,
        )
        # Config files and PENTEST_VERBOSITY may change the level
        quiet = settings.verbosity == "quiet"
        logger = setup_logging(
            verbose=settings.verbosity == "verbose", quiet=quiet, log_file=log_path
        )
        formatter = get_formatter(output_format.value)

        if not quiet:
            _print_banner(settings, output_format.value, output)

        run = analyze_repositories(settings)

        if output is not None:
            _write_output(output, formatter.format(run))
            if not quiet:
                err_console.print(Text(f"Results written to {output}"))
        else:
            formatter.render(run, console)

        if not quiet:
            _print_summary(run)

        if run.cancelled:
            raise typer.Exit(130)

    except typer.Exit:
        raise

    except PentestSchedulerError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        err_console.print(Text.assemble(("Error: ", "red"), str(e)))
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        err_console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)


def _write_output(output: Path, text: str) -> None:
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        raise InvalidPathError(output, e.strerror or str(e)) from e


def _print_banner(settings: AnalysisConfig, output_format: str, output: Optional[Path]) -> None:
    err_console.print(f"[bold]{TITLE}[/bold]")
    err_console.print("=" * len(TITLE))
    err_console.print(Text(f"Analyzing repositories in: {settings.root_dir}"))
    err_console.print(f"Time period: {format_period(settings.period)}")
    err_console.print(f"Output format: {output_format}")
    if output is not None:
        err_console.print(Text(f"Output file: {output}"))
    err_console.print()


def _print_summary(run: AnalysisRun) -> None:
    err_console.print()
    err_console.print("[bold]Analysis Summary:[/bold]")
    err_console.print(f"- Total repositories: {run.total_discovered}")
    err_console.print(f"- Active repositories: {run.active_count}")
    err_console.print(f"- High priority: {run.count_by_priority(Priority.HIGH)}")
    err_console.print(f"- Medium priority: {run.count_by_priority(Priority.MEDIUM)}")
    err_console.print(f"- Low priority: {run.count_by_priority(Priority.LOW)}")
    if run.errors:
        err_console.print(f"- Errors: {len(run.errors)}")
    if run.cancelled:
        err_console.print(
            f"[yellow]Cancelled: only {run.analyzed_count} "
            f"of {run.total_discovered} repositories were analyzed[/yellow]"
        )