"""Prompt rendering for the security analysis request."""

from .builder import (
    RESPONSE_SCHEMA,
    SYSTEM_PROMPT,
    FileTier,
    build_prompt,
    classify_file,
    truncate_content,
)

__all__ = [
    "FileTier",
    "SYSTEM_PROMPT",
    "RESPONSE_SCHEMA",
    "build_prompt",
    "classify_file",
    "truncate_content",
]
