"""Tests for FileMetadataExtractor over real tree-sitter parses."""

import pytest

from depscope.exceptions import ExtractionError
from depscope.scanning import rules
from depscope.scanning.extractor import FileMetadataExtractor, relative_key
from depscope.scanning.models import IssueType, Priority, Severity


@pytest.fixture
def extractor():
    return FileMetadataExtractor()


class TestRecord:
    def test_imports_and_exports(self, make_project, extractor):
        root = make_project(
            {
                "src/app.ts": (
                    "import { helper } from './util';\n"
                    "import type { Config } from '../config';\n"
                    "import React from 'react';\n"
                    "export { thing } from './thing';\n"
                    "const path = require('path');\n"
                    "const lazy = () => import('./lazy');\n"
                    "export function run(): void {}\n"
                    "export const VERSION = '1';\n"
                    "export interface Options { a: number }\n"
                ),
            }
        )
        record, _ = extractor.analyze_file(root / "src/app.ts", root)

        assert record.imports == ("./util", "../config", "react", "./thing", "path", "./lazy")
        assert set(record.exports) == {"thing", "run", "VERSION", "Options"}
        assert record.language == "typescript"
        assert record.relative_path == "src/app.ts"
        assert record.path == str((root / "src/app.ts").resolve())
        assert record.size == (root / "src/app.ts").stat().st_size
        assert record.mtime_ns > 0
        assert len(record.content_hash) == 64

    def test_default_export(self, make_project, extractor):
        root = make_project({"widget.jsx": "export default function Widget() { return <div/>; }\n"})
        record, _ = extractor.analyze_file(root / "widget.jsx", root)
        assert record.exports == ("default",)
        assert record.language == "javascript"

    def test_syntax_errors_fall_back_for_imports(self, make_project, extractor):
        root = make_project({"broken.ts": "import { a } from './a';\nconst = = ;\nimport b from './b';\n"})
        record, _ = extractor.analyze_file(root / "broken.ts", root)
        assert "./a" in record.imports
        assert "./b" in record.imports


class TestIssues:
    def test_single_eval(self, make_project, extractor):
        root = make_project({"danger.ts": "const x = eval('1 + 1');\n"})
        _, report = extractor.analyze_file(root / "danger.ts", root)

        security = report.issues_of(IssueType.SECURITY)
        assert len(security) == 1
        assert security[0].severity == Severity.HIGH
        assert security[0].line == 1
        assert report.metrics.security == 85
        assert report.requires_optimization
        assert report.optimization_priority == Priority.MEDIUM

    def test_repeated_eval_is_high_priority(self, make_project, extractor):
        body = "".join(f"eval('{i}');\n" for i in range(4))
        root = make_project({"worse.ts": body})
        _, report = extractor.analyze_file(root / "worse.ts", root)

        assert len(report.issues_of(IssueType.SECURITY)) == 4
        assert report.metrics.security == 40
        assert report.optimization_priority == Priority.HIGH

    def test_eval_as_property_is_not_flagged(self, make_project, extractor):
        root = make_project({"safe.ts": "const r = sandbox.eval('x');\n"})
        _, report = extractor.analyze_file(root / "safe.ts", root)
        assert report.issues_of(IssueType.SECURITY) == []

    @pytest.mark.parametrize("depth", ["basic", "standard", "deep"])
    def test_long_function_at_every_depth(self, make_project, extractor, depth):
        lines = "\n".join(f"  const v{i} = {i};" for i in range(60))
        root = make_project({"long.ts": f"function big() {{\n{lines}\n}}\n"})

        _, report = extractor.analyze_file(root / "long.ts", root, depth)

        long_fn = [i for i in report.issues if i.rule_id == rules.LONG_FUNCTION.rule_id]
        assert len(long_fn) == 1
        assert long_fn[0].line == 1

    def test_long_file(self, make_project, extractor):
        root = make_project({"huge.js": "const a = 1;\n" * 600})
        _, report = extractor.analyze_file(root / "huge.js", root, "basic")
        assert [i.rule_id for i in report.issues] == [rules.LONG_FILE.rule_id]

    def test_deep_rules(self, make_project, extractor):
        root = make_project(
            {
                "deep.ts": (
                    "el.innerHTML = html;\n"
                    "fetch('http://example.com');\n"
                    "fs.readFileSync('x');\n"
                    "debugger;\n"
                    "const f = new Function('return 1');\n"
                ),
            }
        )
        _, standard = extractor.analyze_file(root / "deep.ts", root, "standard")
        _, deep = extractor.analyze_file(root / "deep.ts", root, "deep")

        assert {i.rule_id for i in standard.issues} == {rules.FUNCTION_CONSTRUCTOR.rule_id}
        assert {i.rule_id: i.line for i in deep.issues} == {
            rules.INNER_HTML.rule_id: 1,
            rules.INSECURE_HTTP.rule_id: 2,
            rules.SYNC_FS.rule_id: 3,
            rules.DEBUGGER.rule_id: 4,
            rules.FUNCTION_CONSTRUCTOR.rule_id: 5,
        }

    def test_clean_file(self, make_project, extractor):
        root = make_project({"clean.ts": "// adds numbers\nexport const add = (a: number, b: number) => a + b;\n"})
        _, report = extractor.analyze_file(root / "clean.ts", root)
        assert report.issues == ()
        assert not report.requires_optimization
        assert report.optimization_priority == Priority.NONE


class TestFailures:
    def test_missing_file(self, tmp_path, extractor):
        with pytest.raises(ExtractionError):
            extractor.analyze_file(tmp_path / "nope.ts", tmp_path)

    def test_binary_file(self, tmp_path, extractor):
        path = tmp_path / "blob.js"
        path.write_bytes(b"\x00\x01\x02binary")
        with pytest.raises(ExtractionError, match="Binary"):
            extractor.analyze_file(path, tmp_path)

    def test_invalid_utf8(self, tmp_path, extractor):
        path = tmp_path / "latin.js"
        path.write_bytes(b"const s = '\xff\xfe';\n")
        with pytest.raises(ExtractionError):
            extractor.analyze_file(path, tmp_path)


def test_relative_key_is_posix(tmp_path):
    nested = tmp_path / "a" / "b.ts"
    assert relative_key(nested, tmp_path) == "a/b.ts"
