"""Auto-fix synthesis: ordered regex templates plus title heuristics."""

from .engine import REVIEW_MARKER, AutoFixEngine
from .templates import DEFAULT_TEMPLATES, FixContext, FixTemplate, context_for, env_var_name

__all__ = [
    "AutoFixEngine",
    "DEFAULT_TEMPLATES",
    "FixContext",
    "FixTemplate",
    "REVIEW_MARKER",
    "context_for",
    "env_var_name",
]
