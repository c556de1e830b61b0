"""Import cycle detection.

Iterative depth-first search with an explicit frame stack, run once from
every node with a fresh visited set. The open path is indexed by node, so a
back edge to any node on it yields the cycle as a slice of the path. Cycles
found from several start nodes are deduplicated by rotation, so A->B->A and
B->A->B are reported once.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence

from ..logging_config import get_logger
from .models import Cycle, CycleReport, CycleSeverity, DependencyGraph

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 20

GENERIC_SUGGESTIONS = (
    "Extract the shared code into an intermediate module that both sides import",
    "Use dependency injection to pass the dependency in instead of importing it",
    "Introduce an interface so modules depend on an abstraction, not on each other",
)


def cycle_severity(length: int) -> CycleSeverity:
    if length <= 2:
        return CycleSeverity.CRITICAL
    if length <= 4:
        return CycleSeverity.MAJOR
    return CycleSeverity.MINOR


def canonical_rotation(members: Sequence[str]) -> tuple[str, ...]:
    """Rotate so the smallest member comes first; direction is preserved."""
    start = min(range(len(members)), key=lambda i: members[i])
    return tuple(members[start:]) + tuple(members[:start])


def suggestions_for(members: Sequence[str], graph: DependencyGraph) -> tuple[str, ...]:
    # Highest fan-out member; max() keeps the first on ties
    candidate = max(members, key=lambda m: graph.nodes[m].fan_out if m in graph.nodes else 0)
    fan_out = graph.nodes[candidate].fan_out if candidate in graph.nodes else 0
    name = os.path.basename(candidate)
    return GENERIC_SUGGESTIONS + (
        f"Consider refactoring {name}, which has {fan_out} dependencies",
    )


class CycleDetector:
    """Find import cycles in a DependencyGraph.

    ``max_depth`` bounds the length of any open path. A branch that would
    go deeper is not followed; the report is then flagged ``incomplete``
    and the node that was cut off is listed in ``truncated_nodes``.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {max_depth}")
        self.max_depth = max_depth

    def detect(self, graph: DependencyGraph) -> CycleReport:
        report = CycleReport()
        seen: set[tuple[str, ...]] = set()
        truncated: set[str] = set()

        for start in sorted(graph.nodes):
            self._search_from(start, graph, seen, truncated, report)

        report.truncated_nodes = sorted(truncated)
        if report.incomplete:
            logger.warning(
                f"Cycle search hit max depth {self.max_depth} at {len(truncated)} nodes; "
                "results may be incomplete"
            )
        logger.debug(f"Found {len(report.cycles)} import cycles")
        return report

    def _search_from(
        self,
        start: str,
        graph: DependencyGraph,
        seen: set[tuple[str, ...]],
        truncated: set[str],
        report: CycleReport,
    ) -> None:
        # visited is scoped to this start node; dedup merges repeats
        visited = {start}
        path = [start]
        position = {start: 0}
        stack: list[Iterator[str]] = [iter(graph.neighbors(start))]

        while stack:
            descended = False
            for neighbor in stack[-1]:
                if neighbor in position:
                    self._record(tuple(path[position[neighbor] :]), graph, seen, report)
                    continue
                if neighbor in visited:
                    continue
                if len(path) >= self.max_depth:
                    report.incomplete = True
                    truncated.add(neighbor)
                    continue
                visited.add(neighbor)
                position[neighbor] = len(path)
                path.append(neighbor)
                stack.append(iter(graph.neighbors(neighbor)))
                descended = True
                break
            if not descended:
                stack.pop()
                del position[path.pop()]

    def _record(
        self,
        members: tuple[str, ...],
        graph: DependencyGraph,
        seen: set[tuple[str, ...]],
        report: CycleReport,
    ) -> None:
        if len(members) < 2:
            return
        key = canonical_rotation(members)
        if key in seen:
            return
        seen.add(key)
        report.cycles.append(
            Cycle(
                members=key,
                severity=cycle_severity(len(key)),
                suggestions=suggestions_for(key, graph),
            )
        )
