"""Rich terminal table formatter for Pentest Scheduler."""

import io
from datetime import datetime, timedelta
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..models import AnalysisRun, Priority
from .base import BaseFormatter

_PRIORITY_STYLE = {
    Priority.HIGH: "red bold",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}

_PRIORITY_ADVICE = {
    Priority.HIGH: "immediate pentesting recommended",
    Priority.MEDIUM: "pentest within 3 months",
    Priority.LOW: "pentest within 6 months",
}

_RECOMMENDATIONS = {
    Priority.HIGH: "Start with HIGH priority repositories - these have significant recent changes",
    Priority.MEDIUM: "Schedule MEDIUM priority repositories for upcoming pentest cycles",
    Priority.LOW: "LOW priority repositories can be tested during maintenance cycles",
}

NAME_WIDTH = 24


def priority_label(priority: Priority) -> Text:
    return Text(priority.value, style=_PRIORITY_STYLE[priority])


def last_commit_label(last_commit: Optional[datetime], now: datetime) -> str:
    """Never / Today / "N days ago" within a week / calendar date."""
    if last_commit is None:
        return "Never"
    age = now - last_commit
    if age < timedelta(days=1):
        return "Today"
    if age < timedelta(days=7):
        return f"{age.days} days ago"
    return last_commit.strftime("%Y-%m-%d")


def _short_name(name: str) -> str:
    if len(name) > NAME_WIDTH:
        return name[: NAME_WIDTH - 3] + "..."
    return name


class TableFormatter(BaseFormatter):
    """Results table, priority summary and recommendations."""

    def render(self, run: AnalysisRun, console: Optional[Console] = None) -> None:
        console = console or Console()
        console.print()
        console.print(Text("Pentest Priority Analysis Results", style="bold cyan"))
        console.print()

        if not run.records:
            console.print("No repositories found matching the criteria.")
            return

        console.print(self._results_table(run))
        self._print_errors(run, console)
        self._print_summary(run, console)

    def format(self, run: AnalysisRun) -> str:
        console = Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)
        self.render(run, console)
        return console.file.getvalue()

    def _results_table(self, run: AnalysisRun) -> Table:
        table = Table(show_header=True, header_style="bold", show_edge=False, pad_edge=False)
        table.add_column("REPOSITORY", no_wrap=True)
        table.add_column("PRIORITY")
        table.add_column("RISK", justify="right")
        table.add_column("COMMITS", justify="right")
        table.add_column("CHANGES%", justify="right")
        table.add_column("LAST COMMIT")
        table.add_column("FILES", justify="right")

        for r in run.records:
            name = Text(_short_name(r.name))
            if r.is_error:
                table.add_row(name, Text("ERROR", style="red"), "-", "-", "-", "-", "-")
                continue
            table.add_row(
                name,
                priority_label(r.priority),
                f"{r.risk_score:.1f}",
                str(r.commit_count),
                f"{r.change_percentage:.2f}%",
                last_commit_label(r.last_commit_time, run.generated_at),
                str(r.files_changed),
            )
        return table

    def _print_errors(self, run: AnalysisRun, console: Console) -> None:
        errors = run.errors
        if not errors:
            return
        console.print()
        console.print(Text("Errors:", style="bold red"))
        for r in errors:
            console.print(Text(f"  {r.name}: {r.error}"))

    def _print_summary(self, run: AnalysisRun, console: Console) -> None:
        counts = {p: run.count_by_priority(p) for p in Priority}

        console.print()
        console.print(Text("Priority Summary:", style="bold"))
        for p in Priority:
            line = Text()
            line.append(f"{p.value:<7}", style=_PRIORITY_STYLE[p])
            line.append(f" {counts[p]} repositories ({_PRIORITY_ADVICE[p]})")
            console.print(line)

        advice = [_RECOMMENDATIONS[p] for p in Priority if counts[p] > 0]
        if advice:
            console.print()
            console.print(Text("Recommendations:", style="bold"))
            for item in advice:
                console.print(Text(f"• {item}"))