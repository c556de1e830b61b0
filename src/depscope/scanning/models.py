"""Per-file data models produced by discovery and extraction.

FileRecord is the structural metadata of one file (imports, exports, size).
FileAnalysisReport is the quality verdict for the same file (issues, scores,
priority). Both are frozen: re-analysis produces new instances.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class IssueType(str, Enum):
    SECURITY = "security"
    PERFORMANCE = "performance"
    COMPLEXITY = "complexity"
    MAINTAINABILITY = "maintainability"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass(frozen=True)
class FileRecord:
    """Structural metadata for one discovered file.

    Attributes:
        path: Absolute path (the file's identity in the dependency graph)
        relative_path: POSIX path relative to the project root
        size: Size in bytes at analysis time
        mtime: Last-modified timestamp (seconds since epoch)
        mtime_ns: Same timestamp in nanoseconds, for exact cache checks
        imports: Raw import specifiers in source order
        exports: Exported symbol names
        content_hash: sha256 of the file bytes, when computed
        language: typescript, tsx, javascript or text
    """

    path: str
    relative_path: str
    size: int
    mtime: float
    mtime_ns: int = 0
    imports: tuple[str, ...] = ()
    exports: tuple[str, ...] = ()
    content_hash: Optional[str] = None
    language: str = "text"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["imports"] = list(self.imports)
        data["exports"] = list(self.exports)
        return data


@dataclass(frozen=True)
class Issue:
    """A single finding inside a file."""

    type: IssueType
    severity: Severity
    description: str
    line: Optional[int] = None
    recommendation: Optional[str] = None
    rule_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "line": self.line,
            "recommendation": self.recommendation,
            "rule_id": self.rule_id,
        }


@dataclass(frozen=True)
class ScoreCard:
    """Four 0-100 scores, higher is better."""

    complexity: float = 100.0
    maintainability: float = 100.0
    security: float = 100.0
    performance: float = 100.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class FileAnalysisReport:
    """Quality report for one file. Immutable once produced."""

    file_path: str
    file_size: int
    modified_time: float
    issues: tuple[Issue, ...] = ()
    metrics: ScoreCard = field(default_factory=ScoreCard)
    summary: str = ""
    requires_optimization: bool = False
    optimization_priority: Priority = Priority.NONE

    def issues_of(self, issue_type: IssueType) -> list[Issue]:
        return [i for i in self.issues if i.type == issue_type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "file_size": self.file_size,
            "modified_time": datetime.fromtimestamp(self.modified_time, tz=timezone.utc).isoformat(),
            "issues": [i.to_dict() for i in self.issues],
            "metrics": self.metrics.to_dict(),
            "summary": self.summary,
            "requires_optimization": self.requires_optimization,
            "optimization_priority": self.optimization_priority.value,
        }
