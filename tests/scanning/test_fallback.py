"""Tests for the regex fallback scanner."""

from depscope.scanning import rules
from depscope.scanning.fallback import RegexFallbackScanner

SAMPLE_MODULE = """
import a from './a';
import { b } from "./b";
import './side-effect';
export * from './reexport';
const fs = require('fs');
const lazy = import('./lazy');
import again from './a';

export function foo() {}
export const bar = 1;
export { baz as qux, quux };
export default foo;
module.exports.legacy = 1;
"""


class TestImports:
    def test_finds_all_forms_in_source_order(self):
        scanner = RegexFallbackScanner()
        assert scanner.extract_imports(SAMPLE_MODULE) == [
            "./a",
            "./b",
            "./side-effect",
            "./reexport",
            "fs",
            "./lazy",
        ]

    def test_empty_content(self):
        assert RegexFallbackScanner().extract_imports("") == []


class TestExports:
    def test_named_clause_commonjs_and_default(self):
        scanner = RegexFallbackScanner()
        assert scanner.extract_exports(SAMPLE_MODULE) == [
            "foo",
            "bar",
            "qux",
            "quux",
            "legacy",
            "default",
        ]


class TestIssues:
    def test_eval_reported_once_without_line(self):
        content = "eval('a');\neval('b');\n"
        issues = RegexFallbackScanner().extract_issues(content, "basic")
        assert len(issues) == 1
        assert issues[0].rule_id == rules.EVAL_USAGE.rule_id
        assert issues[0].line is None

    def test_function_constructor_needs_standard_depth(self):
        content = "const f = new Function('return 1');\n"
        scanner = RegexFallbackScanner()
        assert scanner.extract_issues(content, "basic") == []
        issues = scanner.extract_issues(content, "standard")
        assert [i.rule_id for i in issues] == [rules.FUNCTION_CONSTRUCTOR.rule_id]
        assert issues[0].line == 1

    def test_deep_rules(self):
        content = (
            "el.innerHTML = html;\n"
            "fetch('http://example.com/api');\n"
            "fetch('http://localhost:3000');\n"
            "const data = fs.readFileSync('x');\n"
            "  debugger;\n"
        )
        issues = RegexFallbackScanner().extract_issues(content, "deep")
        by_rule = {i.rule_id: i.line for i in issues}
        assert by_rule == {
            rules.INNER_HTML.rule_id: 1,
            rules.INSECURE_HTTP.rule_id: 2,
            rules.SYNC_FS.rule_id: 4,
            rules.DEBUGGER.rule_id: 5,
        }

    def test_deep_rules_off_at_standard(self):
        content = "el.innerHTML = html;\ndebugger;\n"
        assert RegexFallbackScanner().extract_issues(content, "standard") == []

    def test_comparison_is_not_assignment(self):
        content = "if (el.innerHTML == '') {}\n"
        assert RegexFallbackScanner().extract_issues(content, "deep") == []
