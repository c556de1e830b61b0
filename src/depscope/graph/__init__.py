"""File dependency graph and import cycle detection."""

from .builder import build_dependency_graph, resolve_import
from .cycles import CycleDetector, canonical_rotation, cycle_severity
from .models import (
    Cycle,
    CycleReport,
    CycleSeverity,
    DependencyEdge,
    DependencyGraph,
    DependencyNode,
    EdgeKind,
)

__all__ = [
    "Cycle",
    "CycleDetector",
    "CycleReport",
    "CycleSeverity",
    "DependencyEdge",
    "DependencyGraph",
    "DependencyNode",
    "EdgeKind",
    "build_dependency_graph",
    "canonical_rotation",
    "cycle_severity",
    "resolve_import",
]
