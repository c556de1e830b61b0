"""The analyze command."""

import json
from pathlib import Path
from typing import Optional

import click
import typer

from ..exceptions import ConfigurationError, DepscopeError, InvalidPathError, RunCancelledError
from ..formatters import JsonFormatter, RichFormatter
from ..logging_config import setup_logging
from . import app
from ._common import build_overrides, console, err_console


@app.command()
def analyze(
    path: Path = typer.Argument(
        Path("."),
        help="Project root to analyze",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    depth: Optional[str] = typer.Option(
        None,
        "--depth",
        help="Rule set: basic | standard | deep",
        click_type=click.Choice(["basic", "standard", "deep"], case_sensitive=False),
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "-w",
        "--concurrency",
        help="Worker processes (default: CPU count - 1)",
        min=1,
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Ignore and do not update the caches",
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
        help="Enable debug logging",
    ),
):
    """
    Analyze a project: per-file issues and scores, dependency graph, import cycles.

    [bold cyan]Examples:[/bold cyan]

      depscope analyze .

      depscope analyze ./web --depth deep --json
    """
    from ..api import analyze as run_analysis

    setup_logging(verbose=verbose, quiet=json_output and not verbose)

    try:
        report = run_analysis(
            path,
            config_file=config,
            progress=not json_output,
            use_cache=not no_cache,
            **build_overrides(depth=depth.lower() if depth else None, concurrency=concurrency),
        )
    except InvalidPathError as e:
        _fail(e, 1, json_output)
    except ConfigurationError as e:
        _fail(e, 2, json_output, label="Configuration error")
    except RunCancelledError as e:
        _fail(e, 130, json_output, label="Cancelled")
    except DepscopeError as e:
        _fail(e, 1, json_output)

    if json_output:
        JsonFormatter().render(report)
    else:
        RichFormatter(console).render(report)


def _fail(error: DepscopeError, code: int, json_output: bool, label: str = "Error") -> None:
    if json_output:
        print(json.dumps({"error": error.to_dict()}, indent=2))
    else:
        err_console.print(f"[red]{label}:[/red] {error}")
    raise typer.Exit(code)
