"""Cache management commands."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import DepscopeError
from . import app
from ._common import console, err_console


@app.command("cache-clear")
def cache_clear(
    path: Path = typer.Argument(Path("."), help="Project root whose caches to clear"),
    config: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Configuration file (TOML)", exists=True, dir_okay=False
    ),
):
    """Clear the cached file list and the per-file analysis cache."""
    from ..api import clear_caches

    try:
        clear_caches(path, config_file=config)
    except DepscopeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print("[green]Caches cleared[/green]")
