"""Base exception for Aegis AI."""

from typing import Any, Dict, Optional


class AegisError(Exception):
    """Base exception for all Aegis AI errors.

    ``details`` holds short string context (job id, workflow step, file)
    that is safe to show to API clients; never put credentials in it.
    """

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """JSON error body: ``{"error": message, "details": {...}}``."""
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = dict(self.details)
        return body

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({rendered})"
