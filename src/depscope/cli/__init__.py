"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="depscope",
    help="depscope - dependency graph and quality analysis for TS/JS projects",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .cache import cache_clear as _cache_clear  # noqa: F401, E402


def main() -> None:
    app()


__all__ = ["app", "main"]
