"""Discovery and per-file extraction."""

from .discovery import FileDiscovery, matches_pattern, validate_root
from .extractor import FileMetadataExtractor, relative_key
from .fallback import RegexFallbackScanner
from .languages import detect_language, has_grammar
from .models import (
    FileAnalysisReport,
    FileRecord,
    Issue,
    IssueType,
    Priority,
    ScoreCard,
    Severity,
)

__all__ = [
    "FileDiscovery",
    "FileMetadataExtractor",
    "RegexFallbackScanner",
    "FileAnalysisReport",
    "FileRecord",
    "Issue",
    "IssueType",
    "Priority",
    "ScoreCard",
    "Severity",
    "detect_language",
    "has_grammar",
    "matches_pattern",
    "relative_key",
    "validate_root",
]
