"""FileMetadataExtractor: one file's text -> FileRecord + FileAnalysisReport.

Files in a syntax with a bundled grammar are parsed with tree-sitter; all
others go through the regex fallback. If tree-sitter recovers from syntax
errors, the regex extractor fills in any imports the damaged tree lost.

Usage:
    extractor = FileMetadataExtractor()
    record, report = extractor.analyze_file(path, root, "standard")
"""

from __future__ import annotations

import hashlib
import threading
from pathlib import Path
from typing import Union

from ..exceptions import ExtractionError
from ..logging_config import get_logger
from . import rules, scoring
from .ast_extractor import extract_from_tree
from .fallback import RegexFallbackScanner
from .languages import detect_language, has_grammar
from .models import FileAnalysisReport, FileRecord, Issue
from .treesitter_parser import TreeSitterParser

logger = get_logger(__name__)

PathLike = Union[str, Path]


_local = threading.local()


def _shared_parser() -> TreeSitterParser:
    # One parser set per thread; tree-sitter parsers are not shared across threads
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = _local.parser = TreeSitterParser()
    return parser


def relative_key(path: PathLike, root: PathLike) -> str:
    """Root-relative POSIX path used as the portable report key."""
    return Path(path).resolve().relative_to(Path(root).resolve()).as_posix()


class FileMetadataExtractor:
    """Extracts imports, exports, issues and scores from source files."""

    def __init__(self, parser: TreeSitterParser | None = None) -> None:
        self._parser = parser
        self._fallback = RegexFallbackScanner()

    @property
    def parser(self) -> TreeSitterParser:
        if self._parser is None:
            self._parser = _shared_parser()
        return self._parser

    def analyze_file(
        self, file_path: PathLike, root_dir: PathLike, depth: str = "standard"
    ) -> tuple[FileRecord, FileAnalysisReport]:
        """Analyze a single file.

        Raises:
            ExtractionError: If the file cannot be read or is not text
        """
        path = Path(file_path).resolve()
        try:
            stat = path.stat()
            raw = path.read_bytes()
        except OSError as e:
            raise ExtractionError(path, f"Cannot read file: {e}")

        if b"\x00" in raw[:8192]:
            raise ExtractionError(path, "Binary content")
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionError(path, f"Encoding error: {e}")

        language = detect_language(path)
        imports, exports, issues = self.extract(content, language, depth)
        scores = scoring.score_file(content, issues)
        rel_path = relative_key(path, root_dir)

        record = FileRecord(
            path=str(path),
            relative_path=rel_path,
            size=stat.st_size,
            mtime=stat.st_mtime,
            mtime_ns=stat.st_mtime_ns,
            imports=tuple(imports),
            exports=tuple(exports),
            content_hash=hashlib.sha256(raw).hexdigest(),
            language=language,
        )
        report = FileAnalysisReport(
            file_path=rel_path,
            file_size=stat.st_size,
            modified_time=stat.st_mtime,
            issues=tuple(issues),
            metrics=scores,
            summary=scoring.summarize(issues, scores),
            requires_optimization=scoring.requires_optimization(issues, scores),
            optimization_priority=scoring.optimization_priority(issues, scores),
        )
        logger.debug(f"Analyzed {rel_path}: {len(issues)} issues, {len(imports)} imports")
        return record, report

    def extract(
        self, content: str, language: str, depth: str
    ) -> tuple[list[str], list[str], list[Issue]]:
        """Imports, exports and issues for already-decoded text."""
        issues: list[Issue] = []
        if rules.LONG_FILE.applies_at(depth) and len(content.split("\n")) > rules.LONG_FILE_LINES:
            issues.append(rules.LONG_FILE.issue())

        tree = None
        if has_grammar(language):
            tree = self.parser.parse(content.encode("utf-8"), language)

        if tree is None:
            scanned = self._fallback.scan(content, depth)
            return scanned.imports, scanned.exports, issues + scanned.issues

        extracted = extract_from_tree(tree, depth)
        imports = extracted.imports
        exports = extracted.exports
        if extracted.has_errors:
            logger.debug(f"Syntax errors in {language} source, supplementing with regex scan")
            for specifier in self._fallback.extract_imports(content):
                if specifier not in imports:
                    imports.append(specifier)
            for name in self._fallback.extract_exports(content):
                if name not in exports:
                    exports.append(name)
        return imports, exports, issues + extracted.issues
