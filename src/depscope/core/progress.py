"""Progress reporting — wraps Rich or runs silently."""

from typing import Callable, Protocol, TypeVar

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

T = TypeVar("T")

# (completed, total, percent)
ProgressCallback = Callable[[int, int, float], None]


class Reporter(Protocol):
    def run(self, description: str, total: int, body: Callable[[ProgressCallback], T]) -> T: ...


class ProgressReporter:
    """Rich progress bar wrapper."""

    def __init__(self, console: Console):
        self.console = console

    def run(self, description: str, total: int, body: Callable[[ProgressCallback], T]) -> T:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        ) as progress:
            task_id = progress.add_task(description, total=total or 1)

            def update(completed: int, total: int, percent: float) -> None:
                progress.update(task_id, completed=completed, total=total or 1)

            return body(update)


class SilentReporter:
    """No-op reporter for tests and --quiet mode."""

    def run(self, description: str, total: int, body: Callable[[ProgressCallback], T]) -> T:
        return body(lambda completed, total, percent: None)
