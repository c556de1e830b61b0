"""Tests for ConcurrentAnalysisCoordinator."""

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from depscope.cache import AnalysisCache
from depscope.config import AnalyzerOptions
from depscope.core.coordinator import ConcurrentAnalysisCoordinator, partition
from depscope.core.worker import run_task
from depscope.exceptions import RunCancelledError

from worker_faults import break_pool_on_crashing_file, exit_on_crashing_file


def threads(n):
    return ThreadPoolExecutor(max_workers=n)


@pytest.fixture
def project(make_project):
    root = make_project({f"src/m{i}.ts": f"export const v{i} = {i};\n" for i in range(6)})
    files = sorted(str(p.resolve()) for p in (root / "src").glob("*.ts"))
    return root, files


def _coordinator(root, options, **kwargs):
    kwargs.setdefault("executor_factory", threads)
    return ConcurrentAnalysisCoordinator(root, options, **kwargs)


class TestPartition:
    def test_chunk_size_is_ceiling(self):
        chunks = partition([str(i) for i in range(10)], 3)
        assert [len(c) for c in chunks] == [4, 4, 2]

    def test_more_workers_than_files(self):
        assert partition(["a", "b"], 8) == [["a"], ["b"]]

    def test_empty(self):
        assert partition([], 4) == []


class TestRun:
    def test_all_files_analyzed(self, project, options):
        root, files = project
        run = _coordinator(root, options).run_sync(files)
        assert sorted(run.reports) == [f"src/m{i}.ts" for i in range(6)]
        assert set(run.records) == set(files)
        assert run.failures == {}
        assert run.completed == run.total == 6

    def test_empty_file_list(self, tmp_path, options):
        run = _coordinator(tmp_path, options).run_sync([])
        assert run.total == 0
        assert run.reports == {}

    def test_bad_file_is_isolated(self, project, options):
        root, files = project
        binary = root / "src" / "blob.js"
        binary.write_bytes(b"\x00\x00binary")
        run = _coordinator(root, options).run_sync(files + [str(binary.resolve())])

        assert len(run.reports) == 6
        assert list(run.failures) == ["src/blob.js"]
        assert run.failures["src/blob.js"].kind == "extraction"

    def test_unexpected_worker_exception_is_isolated(self, project, options):
        root, files = project

        def flaky(task):
            if task.file_path.endswith("m3.ts"):
                raise RuntimeError("worker crashed")
            return run_task(task)

        run = _coordinator(root, options, task_fn=flaky).run_sync(files)
        assert len(run.reports) == 5
        failure = run.failures["src/m3.ts"]
        assert failure.kind == "worker"
        assert "worker crashed" in failure.message

    def test_timeout_is_isolated(self, project):
        root, files = project
        options = AnalyzerOptions(concurrency=2, analysis_cache_enabled=False, task_timeout_seconds=0.2)

        def slow(task):
            if task.file_path.endswith("m0.ts"):
                time.sleep(1.0)
            return run_task(task)

        run = _coordinator(root, options, task_fn=slow).run_sync(files)
        assert run.failures["src/m0.ts"].kind == "timeout"
        assert len(run.reports) == 5

    def test_progress_is_monotonic_and_complete(self, project, options):
        root, files = project
        calls = []
        _coordinator(root, options, on_progress=lambda *args: calls.append(args)).run_sync(files)

        assert len(calls) == 6
        percents = [percent for _, _, percent in calls]
        assert percents == sorted(percents)
        assert calls[-1] == (6, 6, 100.0)


class TestCancel:
    def test_cancel_from_progress_callback(self, project, options):
        root, files = project

        def slow(task):
            time.sleep(0.05)
            return run_task(task)

        coordinator = _coordinator(root, options, task_fn=slow)
        coordinator.on_progress = lambda completed, total, percent: coordinator.cancel()

        with pytest.raises(RunCancelledError) as excinfo:
            coordinator.run_sync(files)
        assert coordinator.cancelled
        assert excinfo.value.completed < len(files)
        assert excinfo.value.total == len(files)


class TestCache:
    def test_warm_run_served_from_cache(self, project, tmp_path):
        root, files = project
        options = AnalyzerOptions(concurrency=2)
        with AnalysisCache(tmp_path / "cache") as cache:
            cold = _coordinator(root, options, cache=cache).run_sync(files)
            warm = _coordinator(root, options, cache=cache).run_sync(files)

        assert cold.cache_hits == 0
        assert warm.cache_hits == 6
        assert warm.reports == cold.reports
        assert warm.records == cold.records

    def test_modified_file_is_reanalyzed(self, project, tmp_path):
        root, files = project
        options = AnalyzerOptions(concurrency=2)
        with AnalysisCache(tmp_path / "cache") as cache:
            _coordinator(root, options, cache=cache).run_sync(files)
            target = Path(files[0])
            target.write_text("const x = eval('1');\n// changed and longer\n")
            warm = _coordinator(root, options, cache=cache).run_sync(files)

        assert warm.cache_hits == 5
        assert warm.reports["src/m0.ts"].metrics.security == 85

    def test_depth_is_part_of_the_key(self, project, tmp_path):
        root, files = project
        with AnalysisCache(tmp_path / "cache") as cache:
            _coordinator(root, AnalyzerOptions(concurrency=2), cache=cache).run_sync(files)
            deep = AnalyzerOptions(concurrency=2, analysis_depth="deep")
            run = _coordinator(root, deep, cache=cache).run_sync(files)
        assert run.cache_hits == 0


class TestWorkerCrash:
    @pytest.fixture
    def many(self, make_project):
        root = make_project({f"src/m{i}.ts": f"export const v{i} = {i};\n" for i in range(12)})
        return root, sorted(str(p.resolve()) for p in (root / "src").glob("*.ts"))

    def test_broken_pool_is_replaced(self, many, options):
        root, files = many
        pools = []

        def counting(n):
            pools.append(n)
            return threads(n)

        run = _coordinator(
            root, options, executor_factory=counting, task_fn=break_pool_on_crashing_file
        ).run_sync(files)

        assert list(run.failures) == ["src/m0.ts"]
        assert run.failures["src/m0.ts"].kind == "worker"
        assert len(run.reports) == 11
        # main pool, its replacement, and one isolated re-run
        assert pools == [2, 2, 1]

    def test_dead_worker_process_fails_only_its_file(self, many, options):
        root, files = many
        coordinator = ConcurrentAnalysisCoordinator(
            root, options, task_fn=exit_on_crashing_file
        )
        run = coordinator.run_sync(files)

        assert list(run.failures) == ["src/m0.ts"]
        failure = run.failures["src/m0.ts"]
        assert failure.kind == "worker"
        assert "terminated abruptly" in failure.message
        assert sorted(run.reports) == sorted(f"src/m{i}.ts" for i in range(1, 12))
        assert run.completed == run.total == 12


@pytest.mark.slow
def test_process_pool_end_to_end(project):
    root, files = project
    options = AnalyzerOptions(concurrency=2, analysis_cache_enabled=False)
    run = ConcurrentAnalysisCoordinator(root, options).run_sync(files)
    assert len(run.reports) == 6
    assert run.failures == {}
