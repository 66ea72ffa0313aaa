"""OpenAI-compatible chat-completion backends."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AegisConfig

GROQ_ENDPOINT = "https://api.groq.com/openai/v1/chat/completions"
OPENROUTER_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"


@dataclass(frozen=True)
class ProviderBackend:
    """One chat-completion endpoint and the models to try on it, in order."""

    name: str
    endpoint: str
    api_key: str
    models: tuple[str, ...]
    extra_headers: dict[str, str] = field(default_factory=dict)

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            **self.extra_headers,
        }


def backends_from_config(config: AegisConfig) -> list[ProviderBackend]:
    """Backends that have credentials, Groq first."""
    backends: list[ProviderBackend] = []
    if config.groq_api_key and config.groq_models:
        backends.append(
            ProviderBackend(
                name="groq",
                endpoint=GROQ_ENDPOINT,
                api_key=config.groq_api_key,
                models=tuple(config.groq_models),
            )
        )
    if config.openrouter_api_key and config.openrouter_models:
        backends.append(
            ProviderBackend(
                name="openrouter",
                endpoint=OPENROUTER_ENDPOINT,
                api_key=config.openrouter_api_key,
                models=tuple(config.openrouter_models),
                extra_headers={"X-Title": "Aegis AI"},
            )
        )
    return backends
