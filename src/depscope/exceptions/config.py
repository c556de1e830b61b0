"""Configuration exceptions: the project root, option values, config files."""

from pathlib import Path
from typing import Any, Union

from .base import DepscopeError


class ConfigurationError(DepscopeError):
    """Base class for errors raised before any file is analyzed."""


class InvalidPathError(ConfigurationError):
    """The project root is missing, not a directory, or unreadable.

    This is the only error that aborts a run outright.
    """

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Invalid project root: {path}", details={"path": str(path), "reason": reason})
        self.path = Path(path)
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """An option has a bad value, or is not an option at all."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid option {key}={value!r}",
            details={"key": key, "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ConfigFileError(ConfigurationError):
    """A depscope.toml (or explicit config file) is missing or malformed."""

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Cannot load config file {path}", details={"path": str(path), "reason": reason})
        self.path = Path(path)
        self.reason = reason
