"""Tests for dependency graph construction."""

from depscope.graph.builder import build_dependency_graph, resolve_import
from depscope.scanning.models import FileRecord

ROOT = "/proj"


def _rec(rel, imports=()):
    return FileRecord(path=f"{ROOT}/{rel}", relative_path=rel, size=1, mtime=0.0, imports=tuple(imports))


class TestResolveImport:
    KNOWN = {
        f"{ROOT}/src/a.ts",
        f"{ROOT}/src/b.js",
        f"{ROOT}/src/data.json",
        f"{ROOT}/src/lib/index.tsx",
        f"{ROOT}/src/lib.ts",
        f"{ROOT}/util.ts",
    }

    def _resolve(self, spec, importer=f"{ROOT}/src/a.ts"):
        return resolve_import(spec, importer, self.KNOWN)

    def test_extension_appended(self):
        assert self._resolve("./b") == f"{ROOT}/src/b.js"

    def test_literal_path_first(self):
        assert self._resolve("./data.json") == f"{ROOT}/src/data.json"

    def test_parent_directory(self):
        assert self._resolve("../util") == f"{ROOT}/util.ts"

    def test_file_wins_over_directory_index(self):
        assert self._resolve("./lib") == f"{ROOT}/src/lib.ts"

    def test_directory_index(self):
        known = {f"{ROOT}/src/lib/index.tsx"}
        assert resolve_import("./lib", f"{ROOT}/src/a.ts", known) == f"{ROOT}/src/lib/index.tsx"

    def test_package_specifier_never_resolves(self):
        assert self._resolve("lib") is None
        assert self._resolve("@scope/pkg") is None

    def test_unknown_file(self):
        assert self._resolve("./nope") is None

    def test_extension_order(self):
        known = {f"{ROOT}/x.js", f"{ROOT}/x.ts"}
        assert resolve_import("./x", f"{ROOT}/main.ts", known) == f"{ROOT}/x.ts"
        assert resolve_import("./x", f"{ROOT}/main.ts", known, [".js", ".ts"]) == f"{ROOT}/x.js"


class TestBuildGraph:
    def test_edges_only_for_resolved_relative_imports(self):
        graph = build_dependency_graph(
            [
                _rec("a.ts", ["./b", "react", "./missing"]),
                _rec("b.ts", []),
            ]
        )
        assert graph.edge_count == 1
        assert graph.has_edge(f"{ROOT}/a.ts", f"{ROOT}/b.ts")
        assert graph.unresolved_imports == {f"{ROOT}/a.ts": ["./missing"]}

    def test_fan_in_fan_out_instability(self):
        graph = build_dependency_graph(
            [
                _rec("a.ts", ["./c"]),
                _rec("b.ts", ["./c"]),
                _rec("c.ts", ["./d"]),
                _rec("d.ts", []),
                _rec("lonely.ts", []),
            ]
        )
        c = graph.nodes[f"{ROOT}/c.ts"]
        assert (c.fan_in, c.fan_out) == (2, 1)
        assert c.instability == 1 / 3
        assert graph.nodes[f"{ROOT}/a.ts"].instability == 1.0
        assert graph.nodes[f"{ROOT}/d.ts"].instability == 0.0
        assert graph.nodes[f"{ROOT}/lonely.ts"].instability == 0.0

    def test_duplicate_imports_make_one_edge(self):
        graph = build_dependency_graph([_rec("a.ts", ["./b", "./b.ts", "./b"]), _rec("b.ts")])
        assert graph.edge_count == 1
        assert graph.nodes[f"{ROOT}/b.ts"].fan_in == 1

    def test_self_import_ignored(self):
        graph = build_dependency_graph([_rec("a.ts", ["./a"])])
        assert graph.edge_count == 0

    def test_empty(self):
        graph = build_dependency_graph([])
        assert graph.nodes == {}
        assert graph.to_dict() == {"nodes": [], "edges": []}

    def test_export_uses_relative_paths(self):
        graph = build_dependency_graph([_rec("src/a.ts", ["./b"]), _rec("src/b.ts")])
        data = graph.to_dict()
        assert data["edges"] == [{"source": "src/a.ts", "target": "src/b.ts", "type": "direct"}]
        assert data["nodes"][0] == {
            "id": "src/a.ts",
            "relativePath": "src/a.ts",
            "fanIn": 0,
            "fanOut": 1,
            "instability": 1.0,
        }
        absolute = graph.to_dict(portable=False)
        assert absolute["edges"][0]["source"] == f"{ROOT}/src/a.ts"
