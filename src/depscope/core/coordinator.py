"""ConcurrentAnalysisCoordinator: fan per-file extraction out to a process pool.

The coordinator runs on a single asyncio event loop. It serves cache hits
itself, splits the remaining files into ``ceil(N / C)``-sized chunks, and
drives one lane per chunk; each lane hands its files one at a time to a
pool of C worker processes via ``run_in_executor``. Results come back as
messages and are merged on the loop thread, so no state is shared with
workers.

A worker process that dies breaks the whole pool. The pool is then replaced,
and every task whose future broke is re-run alone in a one-worker pool, so
only the file that kills its worker is recorded as failed.

Usage:
    coordinator = ConcurrentAnalysisCoordinator(root, options, cache=cache)
    run = coordinator.run_sync(files)
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Sequence
from concurrent.futures import BrokenExecutor, Executor, ProcessPoolExecutor
from pathlib import Path
from typing import Callable, Optional

from ..cache import AnalysisCache
from ..config import AnalyzerOptions
from ..exceptions import RunCancelledError, TaskTimeoutError, WorkerError
from ..logging_config import configure_worker_logging, get_logger
from ..scanning.extractor import relative_key
from .messages import AnalysisRun, AnalysisTask, TaskFailure, TaskOutcome, TaskSuccess
from .progress import ProgressCallback
from .worker import run_task

logger = get_logger(__name__)

ExecutorFactory = Callable[[int], Executor]
TaskFunction = Callable[[AnalysisTask], TaskOutcome]


def process_pool(workers: int) -> ProcessPoolExecutor:
    """Default executor: worker processes log at the coordinator's level."""
    return ProcessPoolExecutor(
        max_workers=workers,
        initializer=configure_worker_logging,
        initargs=(logger.getEffectiveLevel(),),
    )


def partition(items: Sequence[str], concurrency: int) -> list[list[str]]:
    """Split items into chunks of ``ceil(len(items) / concurrency)``."""
    if not items:
        return []
    size = max(1, math.ceil(len(items) / concurrency))
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class ConcurrentAnalysisCoordinator:
    """Run extraction for many files with per-file fault isolation."""

    def __init__(
        self,
        root_dir: str | Path,
        options: Optional[AnalyzerOptions] = None,
        cache: Optional[AnalysisCache] = None,
        on_progress: Optional[ProgressCallback] = None,
        executor_factory: Optional[ExecutorFactory] = None,
        task_fn: TaskFunction = run_task,
    ):
        self.root_dir = Path(root_dir).resolve()
        self.options = options or AnalyzerOptions()
        self.cache = cache
        self.on_progress = on_progress
        self._executor_factory = executor_factory or process_pool
        self._task_fn = task_fn

        self._cancel_requested = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lanes: list[asyncio.Task] = []
        self._executor: Optional[Executor] = None
        self._isolation: Optional[asyncio.Lock] = None
        self._workers = 0
        self._completed = 0
        self._total = 0

    # ── Public API ─────────────────────────────────────────────

    def run_sync(self, files: Sequence[str]) -> AnalysisRun:
        return asyncio.run(self.run(files))

    async def run(self, files: Sequence[str]) -> AnalysisRun:
        """Analyze every file; failures are recorded, never raised.

        Raises:
            RunCancelledError: If cancel() was called before the run finished
        """
        self._loop = asyncio.get_running_loop()
        self._completed = 0
        self._total = len(files)
        result = AnalysisRun(total=len(files))

        pending = self._serve_from_cache(files, result)
        if not pending:
            self._check_cancelled()
            return result

        workers = min(self.options.concurrency, len(pending))
        chunks = partition(pending, self.options.concurrency)
        logger.info(
            f"Analyzing {len(pending)} files in {len(chunks)} chunks with {workers} workers "
            f"({result.cache_hits} cached)"
        )

        self._workers = workers
        self._executor = self._executor_factory(workers)
        self._isolation = asyncio.Lock()
        abandon = False
        try:
            self._lanes = [asyncio.ensure_future(self._lane(chunk, result)) for chunk in chunks]
            try:
                outcomes = await asyncio.gather(*self._lanes)
            except asyncio.CancelledError:
                abandon = True
                if self._cancel_requested:
                    raise RunCancelledError(self._completed, self._total) from None
                raise
            abandon = any(outcomes)
            self._check_cancelled()
        finally:
            for lane in self._lanes:
                lane.cancel()
            self._lanes = []
            self._executor.shutdown(wait=not abandon, cancel_futures=True)
            self._executor = None

        logger.info(
            f"Analysis complete: {len(result.reports)} analyzed, {len(result.failures)} errors"
        )
        return result

    def cancel(self) -> None:
        """Abort the run. Outstanding tasks are abandoned, not awaited.

        Safe to call from any thread, including from the progress callback.
        """
        self._cancel_requested = True
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._cancel_lanes)

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested

    # ── Internals ──────────────────────────────────────────────

    def _cancel_lanes(self) -> None:
        for lane in self._lanes:
            lane.cancel()

    def _check_cancelled(self) -> None:
        if self._cancel_requested:
            raise RunCancelledError(self._completed, self._total)

    def _serve_from_cache(self, files: Sequence[str], result: AnalysisRun) -> list[str]:
        if self.cache is None or not self.cache.enabled:
            return list(files)

        pending: list[str] = []
        depth = self.options.analysis_depth
        for file_path in files:
            entry = self.cache.lookup(file_path, depth)
            if entry is None:
                pending.append(file_path)
                continue
            result.records[entry.record.path] = entry.record
            result.reports[entry.report.file_path] = entry.report
            result.cache_hits += 1
            self._tick()
        return pending

    async def _lane(self, chunk: list[str], result: AnalysisRun) -> bool:
        """Process one chunk sequentially. Returns True if a task was left running."""
        left_running = False

        for file_path in chunk:
            if self._cancel_requested:
                break
            task = AnalysisTask(str(file_path), str(self.root_dir), self.options.analysis_depth)
            executor = self._executor
            try:
                outcome = await self._submit(executor, task)
            except asyncio.TimeoutError:
                left_running = True
                outcome = self._timeout_failure(task)
            except BrokenExecutor:
                # The pool died under this task, possibly because of a sibling
                self._replace_executor(executor)
                outcome, stuck = await self._run_isolated(task)
                left_running = left_running or stuck
            except Exception as e:
                error = WorkerError(file_path, f"{type(e).__name__}: {e}")
                outcome = TaskFailure(str(file_path), error.reason, kind="worker")
            self._record(outcome, result)

        return left_running

    async def _submit(self, executor: Executor, task: AnalysisTask) -> TaskOutcome:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(executor, self._task_fn, task)
        return await asyncio.wait_for(future, timeout=self.options.task_timeout_seconds)

    def _timeout_failure(self, task: AnalysisTask) -> TaskFailure:
        error = TaskTimeoutError(task.file_path, self.options.task_timeout_seconds)
        return TaskFailure(task.file_path, error.reason, kind="timeout")

    def _replace_executor(self, broken: Executor) -> None:
        """Swap in a fresh pool once per breakage; later lanes see it already replaced."""
        if self._executor is not broken:
            return
        logger.warning("Worker pool terminated abruptly; starting a new one")
        broken.shutdown(wait=False, cancel_futures=True)
        self._executor = self._executor_factory(self._workers)

    async def _run_isolated(self, task: AnalysisTask) -> tuple[TaskOutcome, bool]:
        """Re-run a task whose pool broke, alone in a single-worker pool.

        Tasks that were merely in flight next to the crashing one complete
        normally here. The task that kills its worker does so again and is
        recorded as a worker failure.
        """
        async with self._isolation:
            executor = self._executor_factory(1)
            stuck = False
            try:
                outcome = await self._submit(executor, task)
            except asyncio.TimeoutError:
                stuck = True
                outcome = self._timeout_failure(task)
            except BrokenExecutor:
                error = WorkerError(task.file_path, "worker process terminated abruptly")
                outcome = TaskFailure(task.file_path, error.reason, kind="worker")
            except Exception as e:
                error = WorkerError(task.file_path, f"{type(e).__name__}: {e}")
                outcome = TaskFailure(task.file_path, error.reason, kind="worker")
            finally:
                executor.shutdown(wait=False, cancel_futures=True)
        return outcome, stuck

    def _record(self, outcome: TaskOutcome, result: AnalysisRun) -> None:
        if isinstance(outcome, TaskSuccess):
            result.records[outcome.record.path] = outcome.record
            result.reports[outcome.report.file_path] = outcome.report
            if self.cache is not None:
                self.cache.store(
                    outcome.record.path, self.options.analysis_depth, outcome.record, outcome.report
                )
        else:
            key = self._relative(outcome.file_path)
            result.failures[key] = outcome
            logger.warning(f"Analysis failed for {key}: {outcome.message}")
        self._tick()

    def _relative(self, file_path: str) -> str:
        try:
            return relative_key(file_path, self.root_dir)
        except ValueError:
            return str(file_path)

    def _tick(self) -> None:
        self._completed += 1
        if self.on_progress is not None:
            percent = 100.0 * self._completed / self._total if self._total else 100.0
            self.on_progress(self._completed, self._total, percent)
