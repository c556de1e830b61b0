"""Messages exchanged between the coordinator and worker processes.

Everything here is immutable and picklable; workers receive a task by
value and answer with exactly one result or failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from ..scanning.models import FileAnalysisReport, FileRecord


@dataclass(frozen=True)
class AnalysisTask:
    file_path: str
    root_dir: str
    analysis_depth: str = "standard"


@dataclass(frozen=True)
class TaskSuccess:
    file_path: str
    record: FileRecord
    report: FileAnalysisReport


@dataclass(frozen=True)
class TaskFailure:
    """Structured error for one file. ``kind`` is extraction, worker or timeout."""

    file_path: str
    message: str
    kind: str = "worker"

    def to_dict(self) -> dict[str, str]:
        return {"file_path": self.file_path, "message": self.message, "kind": self.kind}


TaskOutcome = Union[TaskSuccess, TaskFailure]


@dataclass
class AnalysisRun:
    """Everything one coordinator run produced.

    Attributes:
        records: absolute path -> FileRecord for successfully analyzed files
        reports: root-relative path -> FileAnalysisReport
        failures: root-relative path -> TaskFailure
        cache_hits: number of files served from the analysis cache
        total: number of files submitted
    """

    records: dict[str, FileRecord] = field(default_factory=dict)
    reports: dict[str, FileAnalysisReport] = field(default_factory=dict)
    failures: dict[str, TaskFailure] = field(default_factory=dict)
    cache_hits: int = 0
    total: int = 0

    @property
    def completed(self) -> int:
        return len(self.reports) + len(self.failures)
