"""ReportAggregator: merge per-file reports and cycles into a ProjectReport."""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import numpy as np

from ..core.messages import TaskFailure
from ..graph.models import CycleReport, DependencyGraph
from ..logging_config import get_logger
from ..scanning.models import FileAnalysisReport, Priority, ScoreCard

logger = get_logger(__name__)

DEFAULT_SCORE = 100


@dataclass
class ProjectReport:
    """Project-level result of one analysis run.

    Attributes:
        project_name: Name of the project root directory
        analyzed_files: Files with a successful report
        files_requiring_optimization: Exact count of flagged files
        total_issues: Exact sum of issues over analyzed files
        file_reports: Root-relative path -> FileAnalysisReport
        summary: Rounded mean of each score, 100 when nothing was analyzed
        cycles: Import cycles, rendered with root-relative members
        errored_files: Files whose analysis failed (excluded from averages)
        errors: Root-relative path -> failure message
        files_by_priority: high/medium/low -> sorted paths
        issue_counts_by_type: Issue type -> count
        graph: Dependency graph export
        cycles_incomplete: True if cycle search was depth-limited
        generated_at: Epoch seconds
    """

    project_name: str
    analyzed_files: int = 0
    files_requiring_optimization: int = 0
    total_issues: int = 0
    file_reports: dict[str, FileAnalysisReport] = field(default_factory=dict)
    summary: dict[str, int] = field(default_factory=dict)
    cycles: list[dict[str, Any]] = field(default_factory=list)
    errored_files: int = 0
    errors: dict[str, str] = field(default_factory=dict)
    files_by_priority: dict[str, list[str]] = field(default_factory=dict)
    issue_counts_by_type: dict[str, int] = field(default_factory=dict)
    graph: dict[str, Any] = field(default_factory=dict)
    cycles_incomplete: bool = False
    generated_at: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectName": self.project_name,
            "analyzedFiles": self.analyzed_files,
            "filesRequiringOptimization": self.files_requiring_optimization,
            "totalIssues": self.total_issues,
            "erroredFiles": self.errored_files,
            "summary": dict(self.summary),
            "fileReports": {k: v.to_dict() for k, v in self.file_reports.items()},
            "errors": dict(self.errors),
            "filesByPriority": {k: list(v) for k, v in self.files_by_priority.items()},
            "issueCountsByType": dict(self.issue_counts_by_type),
            "cycles": list(self.cycles),
            "cyclesIncomplete": self.cycles_incomplete,
            "graph": self.graph,
            "generatedAt": datetime.fromtimestamp(self.generated_at, tz=timezone.utc).isoformat(),
        }


def average_scores(reports: Mapping[str, FileAnalysisReport]) -> dict[str, int]:
    """Arithmetic mean per score rounded half up; 100 each for an empty set."""
    names = list(ScoreCard().to_dict())
    if not reports:
        return {name: DEFAULT_SCORE for name in names}
    matrix = np.array(
        [[getattr(r.metrics, name) for name in names] for r in reports.values()],
        dtype=float,
    )
    means = np.floor(matrix.mean(axis=0) + 0.5)
    return {name: int(mean) for name, mean in zip(names, means)}


class ReportAggregator:
    """Build a ProjectReport. Output does not depend on input order."""

    def aggregate(
        self,
        project_name: str,
        reports: Mapping[str, FileAnalysisReport],
        graph: Optional[DependencyGraph] = None,
        cycle_report: Optional[CycleReport] = None,
        failures: Optional[Mapping[str, TaskFailure]] = None,
    ) -> ProjectReport:
        failures = failures or {}
        ordered = {key: reports[key] for key in sorted(reports)}

        by_priority: dict[str, list[str]] = {
            Priority.HIGH.value: [],
            Priority.MEDIUM.value: [],
            Priority.LOW.value: [],
        }
        issue_types: Counter[str] = Counter()
        for key, report in ordered.items():
            if report.optimization_priority != Priority.NONE:
                by_priority[report.optimization_priority.value].append(key)
            issue_types.update(issue.type.value for issue in report.issues)

        cycles: list[dict[str, Any]] = []
        incomplete = False
        if cycle_report is not None:
            cycles = [c.to_dict(graph) for c in cycle_report.cycles]
            cycles.sort(key=lambda c: (c["length"], c["members"]))
            incomplete = cycle_report.incomplete

        project = ProjectReport(
            project_name=project_name,
            analyzed_files=len(ordered),
            files_requiring_optimization=sum(1 for r in ordered.values() if r.requires_optimization),
            total_issues=sum(len(r.issues) for r in ordered.values()),
            file_reports=ordered,
            summary=average_scores(ordered),
            cycles=cycles,
            errored_files=len(failures),
            errors={key: failures[key].message for key in sorted(failures)},
            files_by_priority=by_priority,
            issue_counts_by_type=dict(sorted(issue_types.items())),
            graph=graph.to_dict() if graph is not None else {"nodes": [], "edges": []},
            cycles_incomplete=incomplete,
            generated_at=time.time(),
        )
        logger.info(
            f"Report: {project.analyzed_files} files, {project.total_issues} issues, "
            f"{len(cycles)} cycles, {project.errored_files} errors"
        )
        return project
