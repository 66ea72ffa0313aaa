"""AI provider access: backends and the fallback chain."""

from .backends import GROQ_ENDPOINT, OPENROUTER_ENDPOINT, ProviderBackend, backends_from_config
from .client import Completion, ProviderClient

__all__ = [
    "GROQ_ENDPOINT",
    "OPENROUTER_ENDPOINT",
    "Completion",
    "ProviderBackend",
    "ProviderClient",
    "backends_from_config",
]
