"""Dependency graph construction from extracted import specifiers."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from typing import Optional

from ..logging_config import get_logger
from ..scanning.models import FileRecord
from .models import DependencyEdge, DependencyGraph, DependencyNode, EdgeKind

logger = get_logger(__name__)

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(".")


def candidate_paths(base: str, extensions: Sequence[str]) -> list[str]:
    """Paths tried for one specifier: literal, base+ext, base/index+ext."""
    candidates = [base]
    candidates.extend(base + ext for ext in extensions)
    index = os.path.join(base, "index")
    candidates.extend(index + ext for ext in extensions)
    return candidates


def resolve_import(
    specifier: str,
    importer: str,
    known: set[str],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> Optional[str]:
    """Resolve a relative specifier to a known file id, or None."""
    if not is_relative_specifier(specifier):
        return None
    base = os.path.normpath(os.path.join(os.path.dirname(importer), specifier))
    for candidate in candidate_paths(base, extensions):
        if candidate in known:
            return candidate
    return None


def build_dependency_graph(
    records: Iterable[FileRecord],
    resolve_extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> DependencyGraph:
    """Build the graph from FileRecords.

    Only relative specifiers that resolve to one of the given records become
    edges. Package imports are dropped; relative ones that match nothing are
    kept in ``unresolved_imports``. Duplicate imports of one target yield a
    single edge and a file importing itself yields none.
    """
    records = sorted(records, key=lambda r: r.path)
    graph = DependencyGraph()
    for record in records:
        graph.nodes[record.path] = DependencyNode(id=record.path, relative_path=record.relative_path)
    known = set(graph.nodes)

    for record in records:
        source = graph.nodes[record.path]
        seen: set[str] = set()
        for specifier in record.imports:
            if not is_relative_specifier(specifier):
                continue
            target = resolve_import(specifier, record.path, known, resolve_extensions)
            if target is None:
                graph.unresolved_imports.setdefault(record.path, []).append(specifier)
                continue
            if target == record.path or target in seen:
                continue
            seen.add(target)
            edge = DependencyEdge(source=record.path, target=target, kind=EdgeKind.DIRECT)
            graph.edges.append(edge)
            source.outgoing.append(edge)
            graph.nodes[target].incoming.append(edge)

    unresolved = sum(len(v) for v in graph.unresolved_imports.values())
    logger.debug(
        f"Dependency graph: {len(graph.nodes)} nodes, {graph.edge_count} edges, "
        f"{unresolved} unresolved relative imports"
    )
    return graph
