"""Shared CLI helpers."""

from typing import Optional

from rich.console import Console

console = Console()
err_console = Console(stderr=True)


def build_overrides(
    depth: Optional[str] = None,
    concurrency: Optional[int] = None,
) -> dict:
    """Map CLI options onto AnalyzerOptions keyword overrides."""
    overrides = {}
    if depth is not None:
        overrides["analysis_depth"] = depth
    if concurrency is not None:
        overrides["concurrency"] = concurrency
    return overrides
