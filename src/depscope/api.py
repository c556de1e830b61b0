"""Public API for depscope.

This module provides the main entry point for analysis. Users should call
analyze() instead of wiring discovery, the coordinator and the graph stages
together by hand.

Example:
    >>> from depscope import analyze
    >>>
    >>> report = analyze("/path/to/project")
    >>> report.analyzed_files
    42
    >>>
    >>> # With overrides
    >>> report = analyze("/path/to/project", analysis_depth="deep", concurrency=2)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from rich.console import Console

from .cache import AnalysisCache
from .config import AnalyzerOptions, load_config
from .core.coordinator import ConcurrentAnalysisCoordinator
from .core.messages import AnalysisRun
from .core.progress import ProgressCallback, ProgressReporter, SilentReporter
from .graph.builder import build_dependency_graph
from .graph.cycles import CycleDetector
from .logging_config import get_logger
from .report.aggregator import ProjectReport, ReportAggregator
from .scanning.discovery import FileDiscovery, validate_root

logger = get_logger(__name__)

ANALYSIS_CACHE_SUBDIR = "analysis"


def open_analysis_cache(root: Path, options: AnalyzerOptions, enabled: bool = True) -> AnalysisCache:
    return AnalysisCache(
        cache_dir=options.cache_dir(root) / ANALYSIS_CACHE_SUBDIR,
        ttl_hours=options.analysis_cache_ttl_hours,
        enabled=enabled and options.analysis_cache_enabled,
    )


def analyze(
    path: Union[str, Path] = ".",
    config_file: Optional[Path] = None,
    progress: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    use_cache: bool = True,
    **overrides: Any,
) -> ProjectReport:
    """Analyze a project and return its ProjectReport.

    Pipeline:
    1. Load configuration (auto-discover TOML + apply overrides)
    2. Discover candidate files (TTL-cached file list)
    3. Extract every file in a process pool (per-file cache, fault isolated)
    4. Build the dependency graph and search it for import cycles
    5. Aggregate everything into one report

    Args:
        path: Project root (default: current directory)
        config_file: Optional explicit config file path
        progress: Show a rich progress bar on stderr
        on_progress: Callback receiving (completed, total, percent)
        use_cache: Set False to bypass both the file-list and analysis caches
        **overrides: AnalyzerOptions overrides (e.g. analysis_depth="deep")

    Raises:
        InvalidPathError: If the project root is missing or unreadable
        ConfigurationError: If configuration is invalid
        RunCancelledError: If the run was cancelled
    """
    options = load_config(config_file=config_file, **overrides)
    root = validate_root(Path(path))
    logger.info(f"Starting analysis of {root} (depth={options.analysis_depth})")

    files = FileDiscovery(root, options).discover(use_cache=use_cache)

    with open_analysis_cache(root, options, enabled=use_cache) as cache:
        run = _run_extraction(root, options, cache, files, progress, on_progress)

    graph = build_dependency_graph(run.records.values(), options.resolve_extensions)
    cycle_report = CycleDetector(max_depth=options.max_cycle_depth).detect(graph)

    return ReportAggregator().aggregate(
        project_name=root.name,
        reports=run.reports,
        graph=graph,
        cycle_report=cycle_report,
        failures=run.failures,
    )


def clear_caches(path: Union[str, Path] = ".", config_file: Optional[Path] = None) -> None:
    """Remove the cached file list and every cached per-file analysis."""
    options = load_config(config_file=config_file)
    root = validate_root(Path(path))
    FileDiscovery(root, options).invalidate()
    with open_analysis_cache(root, options) as cache:
        cache.clear()


def _run_extraction(
    root: Path,
    options: AnalyzerOptions,
    cache: AnalysisCache,
    files: list[str],
    progress: bool,
    on_progress: Optional[ProgressCallback],
) -> AnalysisRun:
    reporter = ProgressReporter(Console(stderr=True)) if progress else SilentReporter()

    def body(update: ProgressCallback) -> AnalysisRun:
        def tick(completed: int, total: int, percent: float) -> None:
            update(completed, total, percent)
            if on_progress is not None:
                on_progress(completed, total, percent)

        coordinator = ConcurrentAnalysisCoordinator(root, options, cache=cache, on_progress=tick)
        return coordinator.run_sync(files)

    return reporter.run("Analyzing files", len(files), body)
