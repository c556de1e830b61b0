"""
Per-file analysis cache for depscope.

Uses diskcache for SQLite-based persistent caching. An entry is keyed by
the file's identity snapshot (absolute path, size, mtime) plus the
analysis depth, so any change to the file produces a miss. The TTL is a
coarse upper bound on top of that.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from diskcache import Cache

from .logging_config import get_logger
from .scanning.models import FileAnalysisReport, FileRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileSnapshot:
    """(path, size, mtime) as observed on disk."""

    path: str
    size: int
    mtime_ns: int

    @classmethod
    def of(cls, path: str | Path) -> "FileSnapshot":
        stat = Path(path).stat()
        return cls(path=str(Path(path).resolve()), size=stat.st_size, mtime_ns=stat.st_mtime_ns)


@dataclass(frozen=True)
class AnalysisCacheEntry:
    """Whole cached result for one file. Replaced, never patched."""

    snapshot: FileSnapshot
    depth: str
    record: FileRecord
    report: FileAnalysisReport
    recorded_at: float


class AnalysisCache:
    """
    diskcache-backed store of per-file analysis results.

    Features:
    - Keys derived from file metadata and analysis depth
    - TTL-based expiration (diskcache expiry plus a recorded_at check)
    - Read/write faults degrade to cache misses
    """

    def __init__(self, cache_dir: str | Path, ttl_hours: int = 24, enabled: bool = True):
        """
        Initialize cache.

        Args:
            cache_dir: Directory for cache storage
            ttl_hours: Time-to-live in hours
            enabled: Whether caching is enabled
        """
        self.enabled = enabled
        self.ttl_seconds = ttl_hours * 3600
        self.cache: Optional[Cache] = None

        if self.enabled:
            try:
                self.cache = Cache(str(cache_dir))
                logger.debug(f"Analysis cache at {cache_dir} with TTL={ttl_hours}h")
            except Exception as e:
                logger.warning(f"Analysis cache unavailable at {cache_dir}: {e}; continuing without it")
                self.enabled = False
        else:
            logger.debug("Analysis cache disabled")

    @staticmethod
    def make_key(snapshot: FileSnapshot, depth: str) -> str:
        key_data = f"{snapshot.path}:{snapshot.size}:{snapshot.mtime_ns}:{depth}"
        return hashlib.sha256(key_data.encode()).hexdigest()

    def lookup(self, file_path: str | Path, depth: str) -> Optional[AnalysisCacheEntry]:
        """Return a still-valid entry for the file as it is on disk now."""
        if not self.enabled or self.cache is None:
            return None
        try:
            snapshot = FileSnapshot.of(file_path)
        except OSError:
            return None

        entry = self.get(self.make_key(snapshot, depth))
        if not isinstance(entry, AnalysisCacheEntry):
            return None
        if entry.snapshot != snapshot or entry.depth != depth:
            return None
        if self.ttl_seconds and time.time() - entry.recorded_at > self.ttl_seconds:
            logger.debug(f"Cache entry expired: {snapshot.path}")
            return None
        return entry

    def store(
        self,
        file_path: str | Path,
        depth: str,
        record: FileRecord,
        report: FileAnalysisReport,
    ) -> None:
        """Record a fresh result. The snapshot is taken from the record."""
        if not self.enabled or self.cache is None:
            return
        snapshot = FileSnapshot(
            path=str(Path(file_path).resolve()),
            size=record.size,
            mtime_ns=record.mtime_ns,
        )
        entry = AnalysisCacheEntry(
            snapshot=snapshot,
            depth=depth,
            record=record,
            report=report,
            recorded_at=time.time(),
        )
        self.set(self.make_key(snapshot, depth), entry)

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled or self.cache is None:
            return None
        try:
            value = self.cache.get(key)
            if value is not None:
                logger.debug(f"Cache hit: {key[:16]}...")
            return value
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        if not self.enabled or self.cache is None:
            return
        try:
            self.cache.set(key, value, expire=self.ttl_seconds or None)
            logger.debug(f"Cache set: {key[:16]}...")
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def clear(self) -> None:
        """Clear all cache entries."""
        if not self.enabled or self.cache is None:
            return
        try:
            self.cache.clear()
            logger.info("Analysis cache cleared")
        except Exception as e:
            logger.warning(f"Cache clear failed: {e}")

    def stats(self) -> dict:
        if not self.enabled or self.cache is None:
            return {"enabled": False}
        try:
            return {
                "enabled": True,
                "size": len(self.cache),
                "directory": self.cache.directory,
                "volume": self.cache.volume(),
            }
        except Exception as e:
            logger.warning(f"Cache stats failed: {e}")
            return {"enabled": True, "error": str(e)}

    def close(self) -> None:
        if self.cache is not None:
            self.cache.close()

    def __enter__(self) -> "AnalysisCache":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
