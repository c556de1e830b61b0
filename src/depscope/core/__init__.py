"""Concurrent analysis: task messages, worker entry point, coordinator."""

from .coordinator import ConcurrentAnalysisCoordinator, partition
from .messages import AnalysisRun, AnalysisTask, TaskFailure, TaskSuccess
from .progress import ProgressReporter, SilentReporter
from .worker import run_task

__all__ = [
    "ConcurrentAnalysisCoordinator",
    "partition",
    "AnalysisRun",
    "AnalysisTask",
    "TaskFailure",
    "TaskSuccess",
    "ProgressReporter",
    "SilentReporter",
    "run_task",
]
