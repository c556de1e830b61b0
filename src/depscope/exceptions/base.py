"""Base exception for depscope."""

from typing import Any, Dict, Optional


class DepscopeError(Exception):
    """Base exception for all depscope errors.

    ``details`` holds string-valued context (paths, reasons) that is shown
    after the message and carried into machine-readable error output.
    """

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} ({', '.join(f'{k}={v}' for k, v in self.details.items())})"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form used by ``depscope analyze --json``."""
        return {"type": type(self).__name__, "message": self.message, "details": dict(self.details)}
