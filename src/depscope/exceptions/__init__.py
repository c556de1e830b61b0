"""Exception hierarchy for depscope."""

from .analysis import (
    AnalysisError,
    CacheError,
    DiscoveryError,
    ExtractionError,
    RunCancelledError,
    TaskTimeoutError,
    WorkerError,
)
from .base import DepscopeError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError, InvalidPathError

__all__ = [
    "DepscopeError",
    "AnalysisError",
    "DiscoveryError",
    "ExtractionError",
    "WorkerError",
    "TaskTimeoutError",
    "CacheError",
    "RunCancelledError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidPathError",
    "InvalidConfigError",
]
