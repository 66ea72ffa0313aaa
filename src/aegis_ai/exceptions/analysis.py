"""Analysis-related exceptions: sampling, provider calls, model output."""

from pathlib import Path
from typing import Optional

from .base import AegisError


class AnalysisError(AegisError):
    """Base class for analysis pipeline errors."""
    pass


class SamplingError(AnalysisError):
    """Raised when no usable files can be sampled from a repository."""

    def __init__(self, repo_path: Path, reason: str):
        super().__init__(
            f"Cannot sample repository: {repo_path}",
            details={"repo_path": str(repo_path), "reason": reason},
        )
        self.repo_path = repo_path
        self.reason = reason


class ProviderError(AnalysisError):
    """Raised when a single provider attempt fails.

    Every attempt failure is retryable: the chain moves on to the next
    model instead of retrying the same one.
    """

    def __init__(self, backend: str, model: str, reason: str, status_code: Optional[int] = None):
        details = {"backend": backend, "model": model, "reason": reason}
        if status_code is not None:
            details["status_code"] = str(status_code)

        super().__init__(f"Model {model} on {backend} failed", details=details)
        self.backend = backend
        self.model = model
        self.reason = reason
        self.status_code = status_code


class AllProvidersExhaustedError(AnalysisError):
    """Raised when every model in the fallback chain has failed."""

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        details = {"attempts": str(attempts)}
        if last_error is not None:
            details["last_error"] = str(last_error)

        super().__init__("All AI providers failed", details=details)
        self.attempts = attempts
        self.last_error = last_error


class MalformedProviderOutputError(AnalysisError):
    """Raised internally when a completion cannot be parsed as a result.

    The normalizer recovers from this locally; it never fails a job.
    """

    def __init__(self, reason: str):
        super().__init__(f"Malformed provider output: {reason}", details={"reason": reason})
        self.reason = reason


class EmptyCompletionError(AnalysisError):
    """Raised when there is no completion text to normalize at all."""

    def __init__(self) -> None:
        super().__init__("Provider returned no completion to normalize")
