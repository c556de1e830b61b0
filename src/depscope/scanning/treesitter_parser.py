"""Tree-sitter parser wrapper.

Parsers are built lazily, once per language per process, so each worker
process owns its own instances.

Usage:
    parser = TreeSitterParser()
    tree = parser.parse(code_bytes, "typescript")
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Optional

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from ..logging_config import get_logger

logger = get_logger(__name__)

_GRAMMARS = {
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
    "javascript": tree_sitter_javascript.language,
}


class TreeSitterParser:
    """Unified parse interface over the bundled grammars."""

    def __init__(self) -> None:
        self._parsers: dict[str, Parser] = {}

    def _parser_for(self, language: str) -> Optional[Parser]:
        parser = self._parsers.get(language)
        if parser is None:
            grammar = _GRAMMARS.get(language)
            if grammar is None:
                return None
            parser = Parser(Language(grammar()))
            self._parsers[language] = parser
        return parser

    def is_language_supported(self, language: str) -> bool:
        return language in _GRAMMARS

    def parse(self, code: bytes, language: str) -> Optional[Tree]:
        """Parse code and return its syntax tree, or None for unknown languages."""
        parser = self._parser_for(language)
        if parser is None:
            return None
        return parser.parse(code)


def walk(root: Node) -> Iterator[Node]:
    """Pre-order traversal without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def string_value(node: Optional[Node]) -> Optional[str]:
    """Unquoted value of a string literal node."""
    if node is None or node.type not in ("string", "template_string"):
        return None
    text = node_text(node)
    if len(text) >= 2 and text[0] in "\"'`" and text[-1] == text[0]:
        return text[1:-1]
    return None


def line_of(node: Node) -> int:
    """1-indexed start line."""
    return node.start_point[0] + 1
