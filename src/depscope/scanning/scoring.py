"""Heuristic 0-100 scores and the optimization verdict for one file.

The formulas are kept bit-compatible with downstream consumers, so the
arithmetic here must not be "improved".
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from .models import Issue, IssueType, Priority, ScoreCard, Severity

_CYCLOMATIC_RE = re.compile(r"if|for|while|switch|catch|\?")

SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 7,
    Severity.LOW: 3,
}


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _is_comment_line(stripped: str) -> bool:
    return stripped.startswith("//") or stripped.startswith("/*") or stripped.startswith("*")


def complexity_score(text: str) -> float:
    lines = text.split("\n")
    line_count = len(lines)
    cyclomatic = len(_CYCLOMATIC_RE.findall(text))
    max_braces = max(line.count("{") for line in lines)
    return clamp(100 - (line_count / 10 + cyclomatic * 2 + max_braces * 5))


def maintainability_score(text: str, issues: Sequence[Issue]) -> float:
    code_lines = 0
    comment_lines = 0
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        # "* foo" continuation lines count as both comment and code
        if not (stripped.startswith("//") or stripped.startswith("/*")):
            code_lines += 1
        if _is_comment_line(stripped):
            comment_lines += 1

    comment_ratio = comment_lines / max(1, code_lines)
    maintainability_issues = sum(1 for i in issues if i.type == IssueType.MAINTAINABILITY)
    penalty = (
        maintainability_issues * 10
        + (20 if comment_ratio < 0.1 else 0)
        + (20 if code_lines > 1000 else 0)
    )
    return clamp(100 - penalty)


def weighted_issue_score(issues: Sequence[Issue], issue_type: IssueType) -> float:
    """100 minus severity-weighted count of issues of one type."""
    penalty = sum(SEVERITY_WEIGHTS[i.severity] for i in issues if i.type == issue_type)
    return clamp(100 - penalty)


def score_file(text: str, issues: Sequence[Issue]) -> ScoreCard:
    return ScoreCard(
        complexity=complexity_score(text),
        maintainability=maintainability_score(text, issues),
        security=weighted_issue_score(issues, IssueType.SECURITY),
        performance=weighted_issue_score(issues, IssueType.PERFORMANCE),
    )


def requires_optimization(issues: Sequence[Issue], scores: ScoreCard) -> bool:
    return (
        len(issues) > 0
        or scores.complexity < 60
        or scores.maintainability < 60
        or scores.security < 70
        or scores.performance < 70
    )


def optimization_priority(issues: Sequence[Issue], scores: ScoreCard) -> Priority:
    if (
        any(i.severity == Severity.CRITICAL for i in issues)
        or scores.security < 50
        or scores.performance < 60
        or len(issues) > 10
        or scores.complexity < 40
        or scores.maintainability < 40
    ):
        return Priority.HIGH

    if (
        any(i.severity == Severity.HIGH for i in issues)
        or scores.complexity < 60
        or scores.maintainability < 60
        or scores.performance < 70
    ):
        return Priority.MEDIUM

    if issues:
        return Priority.LOW

    return Priority.NONE


def summarize(issues: Sequence[Issue], scores: ScoreCard) -> str:
    """One-line human readable summary of a file's state."""
    if not issues and scores.complexity > 80 and scores.maintainability > 80:
        return "Well structured; no optimization needed."

    parts = []
    for issue_type in IssueType:
        count = sum(1 for i in issues if i.type == issue_type)
        if count:
            parts.append(f"{count} {issue_type.value}")

    summary = f"{len(issues)} issue(s)"
    if parts:
        summary += ": " + ", ".join(parts)
    summary += "."
    if scores.complexity < 60:
        summary += " High code complexity."
    if scores.maintainability < 60:
        summary += " Low maintainability."
    return summary
