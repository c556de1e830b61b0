"""FileDiscovery: enumerate candidate files under a project root.

Results are cached on disk as
``{"timestamp": <epoch ms>, "options": <fingerprint>, "files": [...]}``
and reused while younger than the configured validity window and built
under the same discovery options. A missing,
corrupt or stale cache is never fatal: the tree is walked again and the
cache rewritten.
"""

from __future__ import annotations

import fnmatch
import hashlib
import json
import time
from pathlib import Path, PurePosixPath
from typing import Optional

from ..config import AnalyzerOptions
from ..exceptions import CacheError, DiscoveryError, InvalidPathError
from ..logging_config import get_logger

logger = get_logger(__name__)

CACHE_FILE_NAME = "file-list-cache.json"


def validate_root(root: Path) -> Path:
    """Resolve the project root, raising InvalidPathError if it is unusable."""
    root = Path(root)
    if not root.exists():
        raise InvalidPathError(root, "does not exist")
    if not root.is_dir():
        raise InvalidPathError(root, "not a directory")
    try:
        next(iter(root.iterdir()), None)
    except OSError as e:
        raise InvalidPathError(root, f"unreadable: {e}")
    return root.resolve()


def matches_pattern(relative: str, pattern: str) -> bool:
    """Glob match where a leading ``**/`` also matches zero directories."""
    pure = PurePosixPath(relative)
    candidates = [pattern]
    while candidates[-1].startswith("**/"):
        candidates.append(candidates[-1][3:])
    for candidate in candidates:
        if pure.match(candidate) or fnmatch.fnmatchcase(relative, candidate):
            return True
    return False


class FileDiscovery:
    """Find files by include/exclude rules with a TTL-cached file list."""

    def __init__(self, root_dir: str | Path, options: Optional[AnalyzerOptions] = None):
        self.options = options or AnalyzerOptions()
        self.root_dir = validate_root(Path(root_dir))
        self.cache_file = self.options.cache_dir(self.root_dir) / CACHE_FILE_NAME

    # ── Public API ─────────────────────────────────────────────

    def discover(self, use_cache: bool = True) -> list[str]:
        """Return sorted, deduplicated absolute paths of candidate files."""
        if use_cache:
            try:
                cached = self._read_cache()
            except CacheError as e:
                logger.warning(f"{e}; recomputing file list")
                cached = None
            if cached is not None:
                logger.debug(f"File list cache hit: {len(cached)} files")
                return cached

        files = self.find_files()
        if use_cache:
            self._write_cache(files)
        logger.info(f"Discovered {len(files)} files under {self.root_dir}")
        return files

    def find_files(self) -> list[str]:
        """Walk every include dir; never consults the cache."""
        found: set[str] = set()
        for include_dir in self.options.include_dirs:
            dir_path = (self.root_dir / include_dir).resolve()
            try:
                found.update(self._scan_dir(dir_path))
            except DiscoveryError as e:
                logger.warning(f"{e.message}: {e.reason}; skipped")
        return sorted(found)

    def invalidate(self) -> None:
        """Drop the cached file list."""
        try:
            self.cache_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove file list cache {self.cache_file}: {e}")

    def fingerprint(self) -> str:
        """sha256 over the options that decide which files are discovered."""
        opts = self.options
        selection = {
            "include_dirs": list(opts.include_dirs),
            "exclude_dirs": list(opts.exclude_dirs),
            "include_file_patterns": list(opts.include_file_patterns),
            "exclude_file_patterns": list(opts.exclude_file_patterns),
            "min_file_size_bytes": opts.min_file_size_bytes,
            "max_file_size_bytes": opts.max_file_size_bytes,
            "cache_dir_name": opts.cache_dir_name,
        }
        encoded = json.dumps(selection, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()

    # ── Walking ────────────────────────────────────────────────

    def _scan_dir(self, dir_path: Path) -> set[str]:
        if not dir_path.exists():
            raise DiscoveryError(dir_path, "directory does not exist")
        if not dir_path.is_dir():
            raise DiscoveryError(dir_path, "not a directory")

        matches: set[str] = set()
        for pattern in self.options.include_file_patterns:
            try:
                candidates = list(dir_path.glob(pattern))
            except (OSError, ValueError) as e:
                raise DiscoveryError(dir_path, f"glob '{pattern}' failed: {e}")
            for candidate in candidates:
                if self._accept(candidate, dir_path):
                    matches.add(str(candidate.resolve()))
        return matches

    def _accept(self, path: Path, base: Path) -> bool:
        try:
            relative = path.relative_to(base)
        except ValueError:
            return False
        rel_posix = relative.as_posix()

        excluded_dirs = set(self.options.exclude_dirs)
        if any(part in excluded_dirs for part in relative.parts[:-1]):
            return False
        # A cache dir inside the tree is never analyzed
        if self.options.cache_dir_name in relative.parts[:-1]:
            return False
        if any(matches_pattern(rel_posix, p) for p in self.options.exclude_file_patterns):
            return False

        try:
            if path.is_symlink() or not path.is_file():
                return False
            size = path.stat().st_size
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            return False

        if size < self.options.min_file_size_bytes or size > self.options.max_file_size_bytes:
            logger.debug(f"Skipped (size): {path} ({size} bytes)")
            return False
        return True

    # ── Cache ──────────────────────────────────────────────────

    def _read_cache(self) -> Optional[list[str]]:
        if not self.cache_file.exists():
            return None
        try:
            data = json.loads(self.cache_file.read_text(encoding="utf-8"))
            timestamp = float(data["timestamp"])
            fingerprint = data.get("options")
            files = [str(f) for f in data["files"]]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise CacheError(self.cache_file, f"corrupt file list cache: {e}")

        if fingerprint != self.fingerprint():
            logger.debug("File list cache built with other discovery options")
            return None

        age_ms = time.time() * 1000 - timestamp
        if age_ms < 0 or age_ms >= self.options.discovery_cache_ttl_seconds * 1000:
            logger.debug("File list cache expired")
            return None
        return [f for f in files if Path(f).is_file()]

    def _write_cache(self, files: list[str]) -> None:
        payload = {
            "timestamp": int(time.time() * 1000),
            "options": self.fingerprint(),
            "files": files,
        }
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.cache_file.with_suffix(".tmp")
            tmp.write_text(json.dumps(payload), encoding="utf-8")
            tmp.replace(self.cache_file)
        except OSError as e:
            logger.warning(f"Could not write file list cache {self.cache_file}: {e}")
