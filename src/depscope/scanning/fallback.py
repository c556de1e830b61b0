"""Regex-based extraction for files without a usable parse tree.

Covers ES module and CommonJS import/export forms. Results are
approximate but good enough for graph construction and scoring.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from . import rules
from .models import Issue

_IMPORT_PATTERNS = [
    re.compile(r"^\s*import\s+(?:type\s+)?(?:[\w$*{}\s,]+?\s+from\s+)?[\"']([^\"']+)[\"']", re.MULTILINE),
    re.compile(
        r"^\s*export\s+(?:type\s+)?(?:\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s+from\s+[\"']([^\"']+)[\"']",
        re.MULTILINE,
    ),
    re.compile(r"\brequire\s*\(\s*[\"']([^\"']+)[\"']\s*\)"),
    re.compile(r"\bimport\s*\(\s*[\"']([^\"']+)[\"']\s*\)"),
]

_NAMED_EXPORT = re.compile(
    r"^\s*export\s+(?:declare\s+)?(?:async\s+)?"
    r"(?:function\s*\*?|abstract\s+class|class|const|let|var|interface|type|enum|namespace)"
    r"\s+([A-Za-z_$][\w$]*)",
    re.MULTILINE,
)
_DEFAULT_EXPORT = re.compile(r"^\s*export\s+default\b", re.MULTILINE)
_EXPORT_CLAUSE = re.compile(r"^\s*export\s+(?:type\s+)?\{([^}]*)\}", re.MULTILINE)
_COMMONJS_EXPORT = re.compile(r"^\s*(?:module\.)?exports\.([A-Za-z_$][\w$]*)\s*=", re.MULTILINE)

_NEW_FUNCTION = re.compile(r"\bnew\s+Function\s*\(")
_INNER_HTML = re.compile(r"\.innerHTML\s*=(?!=)")
_HTTP_URL = re.compile(r"[\"'`](http://[^\"'`\s]*)")
_SYNC_CALL = re.compile(r"\b(" + "|".join(sorted(rules.SYNC_FS_CALLS)) + r")\s*\(")
_DEBUGGER = re.compile(r"^[ \t]*debugger[ \t]*;?[ \t]*$", re.MULTILINE)


@dataclass
class PatternExtraction:
    imports: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)


class RegexFallbackScanner:
    """Best-effort textual scanner used when no grammar applies."""

    def extract_imports(self, content: str) -> list[str]:
        found: list[tuple[int, str]] = []
        for pattern in _IMPORT_PATTERNS:
            found.extend((m.start(), m.group(1)) for m in pattern.finditer(content))
        ordered: list[str] = []
        for _, specifier in sorted(found):
            if specifier not in ordered:
                ordered.append(specifier)
        return ordered

    def extract_exports(self, content: str) -> list[str]:
        names: list[str] = [m.group(1) for m in _NAMED_EXPORT.finditer(content)]
        for m in _EXPORT_CLAUSE.finditer(content):
            for part in m.group(1).split(","):
                part = part.strip()
                if part.startswith("type "):
                    part = part[5:].strip()
                if not part:
                    continue
                if " as " in part:
                    part = part.split(" as ", 1)[1].strip()
                names.append(part)
        names.extend(m.group(1) for m in _COMMONJS_EXPORT.finditer(content))
        if _DEFAULT_EXPORT.search(content):
            names.append("default")
        return list(dict.fromkeys(names))

    def extract_issues(self, content: str, depth: str) -> list[Issue]:
        enabled = rules.active_rules(depth)
        issues: list[Issue] = []

        # Textual eval detection reports once per file, without a line
        if rules.EVAL_USAGE.rule_id in enabled and "eval(" in content:
            issues.append(rules.EVAL_USAGE.issue())

        if rules.FUNCTION_CONSTRUCTOR.rule_id in enabled:
            issues.extend(
                rules.FUNCTION_CONSTRUCTOR.issue(_line_at(content, m.start()))
                for m in _NEW_FUNCTION.finditer(content)
            )
        if rules.INNER_HTML.rule_id in enabled:
            issues.extend(
                rules.INNER_HTML.issue(_line_at(content, m.start()))
                for m in _INNER_HTML.finditer(content)
            )
        if rules.INSECURE_HTTP.rule_id in enabled:
            issues.extend(
                rules.INSECURE_HTTP.issue(_line_at(content, m.start()))
                for m in _HTTP_URL.finditer(content)
                if rules.is_insecure_url(m.group(1))
            )
        if rules.SYNC_FS.rule_id in enabled:
            issues.extend(
                rules.SYNC_FS.issue(_line_at(content, m.start()))
                for m in _SYNC_CALL.finditer(content)
            )
        if rules.DEBUGGER.rule_id in enabled:
            issues.extend(
                rules.DEBUGGER.issue(_line_at(content, m.start()))
                for m in _DEBUGGER.finditer(content)
            )
        return issues

    def scan(self, content: str, depth: str) -> PatternExtraction:
        return PatternExtraction(
            imports=self.extract_imports(content),
            exports=self.extract_exports(content),
            issues=self.extract_issues(content, depth),
        )


def _line_at(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1
