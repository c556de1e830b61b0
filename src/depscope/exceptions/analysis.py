"""Analysis-related exceptions: discovery, extraction, workers, cache."""

from pathlib import Path
from typing import Union

from .base import DepscopeError

PathLike = Union[str, Path]


class AnalysisError(DepscopeError):
    """Base class for analysis-related errors."""

    pass


class DiscoveryError(AnalysisError):
    """Raised when an include directory cannot be walked."""

    def __init__(self, directory: PathLike, reason: str):
        super().__init__(
            f"Cannot discover files in: {directory}",
            details={"directory": str(directory), "reason": reason},
        )
        self.directory = directory
        self.reason = reason


class ExtractionError(AnalysisError):
    """Raised when a file cannot be read or parsed."""

    def __init__(self, filepath: PathLike, reason: str):
        super().__init__(
            f"Failed to extract metadata from {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class WorkerError(AnalysisError):
    """Raised when a worker task fails unexpectedly."""

    def __init__(self, filepath: PathLike, reason: str):
        super().__init__(
            f"Worker failed on {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class TaskTimeoutError(WorkerError):
    """Raised when a single-file task exceeds its time limit."""

    def __init__(self, filepath: PathLike, seconds: float):
        super().__init__(filepath, f"timed out after {seconds}s")
        self.seconds = seconds


class CacheError(AnalysisError):
    """Raised when a cache artifact cannot be read or written."""

    def __init__(self, cache_path: PathLike, reason: str):
        super().__init__(
            f"Cache unavailable: {cache_path}",
            details={"cache_path": str(cache_path), "reason": reason},
        )
        self.cache_path = cache_path
        self.reason = reason


class RunCancelledError(AnalysisError):
    """Raised when a run is aborted by its caller."""

    def __init__(self, completed: int, total: int):
        super().__init__(
            "Analysis run cancelled",
            details={"completed": str(completed), "total": str(total)},
        )
        self.completed = completed
        self.total = total
