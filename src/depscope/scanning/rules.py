"""Issue rule catalogue.

Each rule has a minimum analysis depth; a run at a given depth applies
every rule whose level is at or below it (basic < standard < deep).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import Issue, IssueType, Severity

_DEPTH_LEVEL = {"basic": 0, "standard": 1, "deep": 2}

LONG_FUNCTION_LINES = 50
LONG_FILE_LINES = 500

SYNC_FS_CALLS = frozenset(
    {
        "readFileSync",
        "writeFileSync",
        "appendFileSync",
        "existsSync",
        "readdirSync",
        "statSync",
        "mkdirSync",
        "execSync",
    }
)


@dataclass(frozen=True)
class Rule:
    rule_id: str
    type: IssueType
    severity: Severity
    description: str
    recommendation: str
    depth: str = "basic"

    def applies_at(self, depth: str) -> bool:
        return _DEPTH_LEVEL[self.depth] <= _DEPTH_LEVEL[depth]

    def issue(self, line: Optional[int] = None) -> Issue:
        return Issue(
            type=self.type,
            severity=self.severity,
            description=self.description,
            line=line,
            recommendation=self.recommendation,
            rule_id=self.rule_id,
        )


EVAL_USAGE = Rule(
    "security-eval-usage",
    IssueType.SECURITY,
    Severity.HIGH,
    "eval() usage detected",
    "Avoid eval(); parse data with JSON.parse or use static logic",
)
LONG_FILE = Rule(
    "maintainability-long-file",
    IssueType.MAINTAINABILITY,
    Severity.MEDIUM,
    f"File longer than {LONG_FILE_LINES} lines",
    "Split this file into smaller modules",
)
LONG_FUNCTION = Rule(
    "complexity-long-function",
    IssueType.COMPLEXITY,
    Severity.MEDIUM,
    f"Function longer than {LONG_FUNCTION_LINES} lines",
    "Split this function into smaller helpers",
)
FUNCTION_CONSTRUCTOR = Rule(
    "security-function-constructor",
    IssueType.SECURITY,
    Severity.HIGH,
    "Function constructor can execute arbitrary code",
    "Replace new Function(...) with a static function",
    depth="standard",
)
INNER_HTML = Rule(
    "security-innerhtml-assignment",
    IssueType.SECURITY,
    Severity.MEDIUM,
    "Assignment to innerHTML may introduce XSS",
    "Use textContent or sanitize the markup before inserting it",
    depth="deep",
)
INSECURE_HTTP = Rule(
    "security-http-url",
    IssueType.SECURITY,
    Severity.LOW,
    "Unencrypted http:// URL",
    "Use https:// for remote endpoints",
    depth="deep",
)
SYNC_FS = Rule(
    "performance-sync-io",
    IssueType.PERFORMANCE,
    Severity.MEDIUM,
    "Synchronous filesystem or process call blocks the event loop",
    "Use the asynchronous API (fs.promises, child_process.exec)",
    depth="deep",
)
DEBUGGER = Rule(
    "maintainability-debugger-statement",
    IssueType.MAINTAINABILITY,
    Severity.LOW,
    "debugger statement left in code",
    "Remove debugger statements before committing",
    depth="deep",
)

ALL_RULES = (
    EVAL_USAGE,
    LONG_FILE,
    LONG_FUNCTION,
    FUNCTION_CONSTRUCTOR,
    INNER_HTML,
    INSECURE_HTTP,
    SYNC_FS,
    DEBUGGER,
)


def active_rules(depth: str) -> frozenset[str]:
    """Rule ids enabled at ``depth``."""
    return frozenset(rule.rule_id for rule in ALL_RULES if rule.applies_at(depth))


def is_insecure_url(value: str) -> bool:
    return value.startswith("http://") and "localhost" not in value and "127.0.0.1" not in value
