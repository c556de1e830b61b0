"""Suffix-based language detection."""

from pathlib import Path
from typing import Union

# Languages with a tree-sitter grammar. Anything else is scanned as text.
AST_LANGUAGES = frozenset({"typescript", "tsx", "javascript"})

_SUFFIX_LANGUAGE = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}


def detect_language(filepath: Union[str, Path]) -> str:
    """Return the language name for a file, or ``"text"``."""
    return _SUFFIX_LANGUAGE.get(Path(filepath).suffix.lower(), "text")


def has_grammar(language: str) -> bool:
    return language in AST_LANGUAGES
