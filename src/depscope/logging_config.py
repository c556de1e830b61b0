"""
Logging configuration for depscope.

The coordinator process logs through a rich handler on stderr. Worker
processes get a plain stream handler at the parent's level, since rich
output from several processes would interleave.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "depscope"
WORKER_FORMAT = "%(processName)s %(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def level_for(verbose: bool = False, quiet: bool = False) -> int:
    """quiet wins over verbose; the default shows warnings and errors."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """
    Configure logging with a rich handler for the main process.

    Args:
        verbose: Enable DEBUG level logging (with source paths and locals)
        quiet: Suppress all but ERROR level logging
        log_file: Optional file to append plain-text logs to

    Returns:
        The package root logger
    """
    level = level_for(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(str(log_file), mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def configure_worker_logging(level: int) -> None:
    """ProcessPoolExecutor initializer: mirror the parent's level in a worker."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    if not any(getattr(h, "_depscope_worker", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(WORKER_FORMAT))
        handler._depscope_worker = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        # Forked workers inherit the parent's rich handler on the root logger
        logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger namespaced under ``depscope``.

    Args:
        name: Module name (e.g., 'depscope.graph.builder').
              If None, returns the package root logger
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
