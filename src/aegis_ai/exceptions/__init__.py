"""Exception hierarchy for Aegis AI."""

from .analysis import (
    AllProvidersExhaustedError,
    AnalysisError,
    EmptyCompletionError,
    MalformedProviderOutputError,
    ProviderError,
    SamplingError,
)
from .base import AegisError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    SecurityError,
)
from .fixes import (
    FixApplicationError,
    FixError,
    FixIndexInvalidError,
    LineOutOfRangeError,
    PullRequestCreationError,
)
from .jobs import (
    DuplicateJobError,
    InvalidTransitionError,
    JobError,
    JobNotFoundError,
    JobNotReadyError,
)

__all__ = [
    "AegisError",
    "AnalysisError",
    "SamplingError",
    "ProviderError",
    "AllProvidersExhaustedError",
    "MalformedProviderOutputError",
    "EmptyCompletionError",
    "JobError",
    "JobNotFoundError",
    "JobNotReadyError",
    "DuplicateJobError",
    "InvalidTransitionError",
    "FixError",
    "FixIndexInvalidError",
    "LineOutOfRangeError",
    "FixApplicationError",
    "PullRequestCreationError",
    "ConfigurationError",
    "InvalidConfigError",
    "SecurityError",
]
