"""Configuration loading and management for Aegis AI.

Configuration sources are merged in priority order:
    1. Defaults (defined in AegisConfig)
    2. Global config (~/.aegis-ai.toml)
    3. Project config (./aegis-ai.toml)
    4. Explicit config file
    5. Environment variables (AEGIS_* prefix, plus GROQ_API_KEY,
       OPENROUTER_API_KEY and GITHUB_TOKEN)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(max_files=10)
    >>> config.max_files
    10
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

_BRANCH_PREFIX_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._/-]*[A-Za-z0-9]$")

# Conventional variable names honoured alongside the AEGIS_* prefix
_SECRET_ENV_ALIASES = {
    "GROQ_API_KEY": "groq_api_key",
    "OPENROUTER_API_KEY": "openrouter_api_key",
    "GITHUB_TOKEN": "github_token",
}


@dataclass(frozen=True)
class PromptBudgets:
    """Per-tier character budgets for file content in the analysis prompt.

    Attributes:
        security_critical_chars: Tier 1 (credential/config/infra-sounding names)
        config_chars: Tier 2 (structured config extensions)
        source_chars: Tier 3 (everything else, tightest budget)
    """

    security_critical_chars: int = 4000
    config_chars: int = 2000
    source_chars: int = 1500

    def __post_init__(self) -> None:
        for field_name in ("security_critical_chars", "config_chars", "source_chars"):
            if getattr(self, field_name) < 1:
                raise ValueError(f"{field_name} must be at least 1")
        if self.source_chars > min(self.config_chars, self.security_critical_chars):
            raise ValueError("source_chars must not exceed the other tier budgets")


@dataclass(frozen=True)
class AegisConfig:
    """Runtime configuration for the analysis and remediation pipeline.

    Attributes:
        Providers:
            groq_api_key / openrouter_api_key: a backend is used only when keyed
            groq_models / openrouter_models: fallback order per backend
            provider_timeout_seconds: bound on each model attempt
            temperature, max_tokens, top_p: completion parameters

        Sampling:
            max_files: maximum sampled files per repository
            max_file_size_bytes: files above this size are skipped
            max_total_bytes: stop sampling once this much content is collected

        Git and GitHub:
            git_timeout_seconds: bound on every git subprocess
            clone_depth: shallow clone depth (0 = full history)
            git_author_name / git_author_email: identity for fix commits
            github_api_url / github_token: pull requests and PR comments

        Remediation:
            allowed_origin: origin substituted for wildcard CORS settings
            fix_branch_prefix: leading part of every fix branch name

        Execution:
            analysis_workers: background worker threads for analysis jobs
            verbosity: logging verbosity level
    """

    # Providers
    groq_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    groq_models: list[str] = field(
        default_factory=lambda: [
            "llama-3.1-70b-versatile",
            "mixtral-8x7b-32768",
            "llama-3.1-8b-instant",
        ]
    )
    openrouter_models: list[str] = field(
        default_factory=lambda: [
            "meta-llama/llama-3.1-70b-instruct",
            "mistralai/mixtral-8x7b-instruct",
        ]
    )
    provider_timeout_seconds: float = 60.0
    temperature: float = 0.1
    max_tokens: int = 8000
    top_p: float = 0.9

    # Sampling
    max_files: int = 25
    max_file_size_bytes: int = 200_000
    max_total_bytes: int = 1_500_000

    # Prompt budgets (nested config)
    budgets: PromptBudgets = field(default_factory=PromptBudgets)

    # Git and GitHub
    git_timeout_seconds: int = 300
    clone_depth: int = 1
    git_author_name: str = "Aegis AI"
    git_author_email: str = "aegis-ai@users.noreply.github.com"
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None

    # Remediation
    allowed_origin: str = "https://app.example.com"
    fix_branch_prefix: str = "security-fix"

    # Execution
    analysis_workers: int = 4
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.provider_timeout_seconds <= 0:
            raise ValueError("provider_timeout_seconds must be positive")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be between 0.0 and 2.0")
        if not 0.0 < self.top_p <= 1.0:
            raise ValueError("top_p must be in (0.0, 1.0]")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be at least 1")

        if self.max_files < 1:
            raise ValueError("max_files must be at least 1")
        if self.max_file_size_bytes < 1:
            raise ValueError("max_file_size_bytes must be at least 1")
        if self.max_total_bytes < self.max_file_size_bytes:
            raise ValueError("max_total_bytes must be at least max_file_size_bytes")

        if self.git_timeout_seconds < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        if self.clone_depth < 0:
            raise ValueError("clone_depth must be non-negative")
        if self.analysis_workers < 1:
            raise ValueError("analysis_workers must be at least 1")

        if not self.allowed_origin.startswith(("http://", "https://")):
            raise ValueError("allowed_origin must be an http(s) origin")
        if not _BRANCH_PREFIX_RE.match(self.fix_branch_prefix):
            raise ValueError("fix_branch_prefix must be a valid git branch name segment")

    @property
    def has_provider(self) -> bool:
        """True when at least one AI backend has credentials."""
        return bool(self.groq_api_key or self.openrouter_api_key)


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AegisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AegisConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".aegis-ai.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "aegis-ai.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    # [budgets] section from TOML
    budgets = merged.pop("budgets", None)
    if budgets is not None:
        if isinstance(budgets, dict):
            try:
                merged["budgets"] = PromptBudgets(**budgets)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid [budgets] config: {e}")
        elif isinstance(budgets, PromptBudgets):
            merged["budgets"] = budgets

    try:
        return AegisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from environment variables.

    Every dataclass field maps to ``AEGIS_<FIELD>``; list fields take a
    comma-separated value. The conventional secret names (``GROQ_API_KEY``
    and friends) are read first so an explicit AEGIS_* value wins.
    """
    type_hints = get_type_hints(AegisConfig)
    result: dict[str, Any] = {}

    for env_key, field_name in _SECRET_ENV_ALIASES.items():
        value = os.environ.get(env_key)
        if value:
            result[field_name] = value

    for field_name in AegisConfig.__dataclass_fields__:
        env_key = f"AEGIS_{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that cannot be expressed in an env var.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list:
        return [item.strip() for item in value.split(",") if item.strip()]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If no TOML parser is available
        Exception: If TOML parsing fails
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
