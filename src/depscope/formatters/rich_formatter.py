"""Rich terminal formatter for depscope."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..report.aggregator import ProjectReport
from .base import BaseFormatter

MAX_LISTED_FILES = 15


def _score_style(score: float) -> str:
    if score < 50:
        return "red"
    elif score < 70:
        return "yellow"
    else:
        return "green"


def _severity_label(severity: str) -> str:
    if severity == "critical":
        return "[red bold]critical[/red bold]"
    elif severity == "major":
        return "[yellow]major[/yellow]"
    else:
        return "[dim]minor[/dim]"


class RichFormatter(BaseFormatter):
    """Summary panel, priority table and cycle list."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render(self, report: ProjectReport) -> None:
        self._print_summary(report)
        self._print_files(report)
        self._print_cycles(report)
        self._print_errors(report)

    def format(self, report: ProjectReport) -> str:
        # Rich output goes directly to the console
        self.render(report)
        return ""

    def _print_summary(self, report: ProjectReport) -> None:
        scores = "  ".join(
            f"{name}: [{_score_style(value)}]{value}[/{_score_style(value)}]"
            for name, value in report.summary.items()
        )
        body = (
            f"Analyzed files: [bold]{report.analyzed_files}[/bold]"
            f"   Requiring optimization: [bold]{report.files_requiring_optimization}[/bold]"
            f"   Issues: [bold]{report.total_issues}[/bold]"
            f"   Errors: [bold]{report.errored_files}[/bold]\n{scores}"
        )
        self.console.print(
            Panel(body, title=f"[bold cyan]{report.project_name}[/bold cyan]", expand=False)
        )

    def _print_files(self, report: ProjectReport) -> None:
        flagged = [
            (priority, path)
            for priority in ("high", "medium")
            for path in report.files_by_priority.get(priority, [])
        ]
        if not flagged:
            return

        table = Table(title="Files needing attention")
        table.add_column("Priority")
        table.add_column("File")
        table.add_column("Issues", justify="right")
        table.add_column("Security", justify="right")
        table.add_column("Complexity", justify="right")
        for priority, path in flagged[:MAX_LISTED_FILES]:
            file_report = report.file_reports[path]
            table.add_row(
                priority,
                path,
                str(len(file_report.issues)),
                f"{file_report.metrics.security:.0f}",
                f"{file_report.metrics.complexity:.0f}",
            )
        self.console.print(table)
        if len(flagged) > MAX_LISTED_FILES:
            self.console.print(f"[dim]... and {len(flagged) - MAX_LISTED_FILES} more[/dim]")

    def _print_cycles(self, report: ProjectReport) -> None:
        if not report.cycles:
            self.console.print("[green]No import cycles found.[/green]")
        for cycle in report.cycles:
            path = " -> ".join([*cycle["members"], cycle["members"][0]])
            self.console.print(f"{_severity_label(cycle['severity'])}  {path}")
        if report.cycles_incomplete:
            self.console.print(
                "[yellow]Cycle search reached its depth limit; some cycles may be missing.[/yellow]"
            )

    def _print_errors(self, report: ProjectReport) -> None:
        for path, message in report.errors.items():
            self.console.print(f"[red]error[/red] {path}: {message}")
