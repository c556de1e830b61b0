"""Data models for the file dependency graph and its cycles.

Edges are directed: an edge (A, B) means file A imports file B. Node ids
are absolute paths; ``relative_path`` keeps exports portable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EdgeKind(str, Enum):
    DIRECT = "direct"


class CycleSeverity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


@dataclass(frozen=True)
class DependencyEdge:
    source: str
    target: str
    kind: EdgeKind = EdgeKind.DIRECT


@dataclass
class DependencyNode:
    """One file in the graph. Read-only once the builder returns."""

    id: str
    relative_path: str
    incoming: list[DependencyEdge] = field(default_factory=list)
    outgoing: list[DependencyEdge] = field(default_factory=list)

    @property
    def fan_in(self) -> int:
        return len(self.incoming)

    @property
    def fan_out(self) -> int:
        return len(self.outgoing)

    @property
    def instability(self) -> float:
        """fan_out / (fan_in + fan_out), 0.0 for isolated nodes."""
        total = self.fan_in + self.fan_out
        if total == 0:
            return 0.0
        return self.fan_out / total


@dataclass
class DependencyGraph:
    """First-class file dependency graph built from relative imports."""

    nodes: dict[str, DependencyNode] = field(default_factory=dict)
    edges: list[DependencyEdge] = field(default_factory=list)

    # Relative specifiers that matched no known file, per importing node
    unresolved_imports: dict[str, list[str]] = field(default_factory=dict)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def neighbors(self, node_id: str) -> list[str]:
        node = self.nodes.get(node_id)
        if node is None:
            return []
        return [edge.target for edge in node.outgoing]

    def has_edge(self, source: str, target: str) -> bool:
        return target in self.neighbors(source)

    def relative(self, node_id: str) -> str:
        node = self.nodes.get(node_id)
        return node.relative_path if node is not None else node_id

    def export_id(self, node_id: str, portable: bool = True) -> str:
        return self.relative(node_id) if portable else node_id

    def to_dict(self, portable: bool = True) -> dict[str, Any]:
        """Export per the graph document format.

        With ``portable`` set, ids are root-relative paths so the document
        is stable across machines; otherwise they are absolute paths.
        """
        return {
            "nodes": [
                {
                    "id": self.export_id(node.id, portable),
                    "relativePath": node.relative_path,
                    "fanIn": node.fan_in,
                    "fanOut": node.fan_out,
                    "instability": node.instability,
                }
                for node in sorted(self.nodes.values(), key=lambda n: n.relative_path)
            ],
            "edges": [
                {
                    "source": self.export_id(edge.source, portable),
                    "target": self.export_id(edge.target, portable),
                    "type": edge.kind.value,
                }
                for edge in self.edges
            ],
        }


@dataclass(frozen=True)
class Cycle:
    """An import loop. ``members`` are distinct ids in traversal order."""

    members: tuple[str, ...]
    severity: CycleSeverity
    suggestions: tuple[str, ...] = ()

    @property
    def length(self) -> int:
        return len(self.members)

    def closed_path(self) -> list[str]:
        """Members with the first repeated at the end."""
        return [*self.members, self.members[0]]

    def to_dict(self, graph: DependencyGraph | None = None, portable: bool = True) -> dict[str, Any]:
        if graph is not None:
            members = [graph.export_id(m, portable) for m in self.members]
        else:
            members = list(self.members)
        return {
            "members": members,
            "length": self.length,
            "severity": self.severity.value,
            "suggestions": list(self.suggestions),
        }


@dataclass
class CycleReport:
    """Result of one cycle search.

    ``incomplete`` is set when the depth limit truncated at least one branch;
    cycles longer than the limit may then be missing.
    """

    cycles: list[Cycle] = field(default_factory=list)
    incomplete: bool = False
    truncated_nodes: list[str] = field(default_factory=list)

    def by_severity(self, severity: CycleSeverity) -> list[Cycle]:
        return [c for c in self.cycles if c.severity == severity]
