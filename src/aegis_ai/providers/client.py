"""Chat-completion client with an ordered model fallback chain.

Each (backend, model) pair is tried once, in order. The first attempt
that yields non-empty completion text wins; any other outcome moves on
to the next pair.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import httpx

from ..exceptions import AllProvidersExhaustedError, ProviderError
from ..logging_config import get_logger, redact
from ..prompting import SYSTEM_PROMPT
from .backends import ProviderBackend

logger = get_logger(__name__)


@dataclass(frozen=True)
class Completion:
    text: str
    backend: str
    model: str
    attempts: int


class ProviderClient:
    """Send one prompt through the fallback chain.

    Parameters
    ----------
    backends : sequence of ProviderBackend
        Keyed endpoints in priority order.
    http_client : httpx.Client, optional
        Injected client (tests pass one built on ``httpx.MockTransport``).
    timeout : float
        Per-attempt bound in seconds.
    """

    def __init__(
        self,
        backends: Sequence[ProviderBackend],
        *,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 60.0,
        temperature: float = 0.1,
        max_tokens: int = 8000,
        top_p: float = 0.9,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self.backends = list(backends)
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.system_prompt = system_prompt
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout, trust_env=False)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ProviderClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def chain(self) -> list[tuple[ProviderBackend, str]]:
        return [(backend, model) for backend in self.backends for model in backend.models]

    def complete(self, prompt: str) -> Completion:
        """Return the first non-empty completion in the chain.

        Raises:
            AllProvidersExhaustedError: If every attempt failed (or the chain is empty)
        """
        attempts = 0
        last_error: Optional[ProviderError] = None

        for backend, model in self.chain:
            attempts += 1
            try:
                text = self._call(backend, model, prompt)
            except ProviderError as e:
                last_error = e
                logger.warning(
                    "Attempt %d failed (%s/%s): %s",
                    attempts, backend.name, model, self._redact(e.reason),
                )
                continue

            logger.info("Completion from %s/%s after %d attempt(s)", backend.name, model, attempts)
            return Completion(text=text, backend=backend.name, model=model, attempts=attempts)

        raise AllProvidersExhaustedError(attempts, last_error)

    def _payload(self, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
        }

    def _call(self, backend: ProviderBackend, model: str, prompt: str) -> str:
        """One attempt. Every failure is reported as a ProviderError."""
        try:
            response = self._client.post(
                backend.endpoint,
                json=self._payload(model, prompt),
                headers=backend.headers(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(backend.name, model, f"timeout: {e}")
        except httpx.HTTPError as e:
            raise ProviderError(backend.name, model, f"network error: {e}")

        if not response.is_success:
            raise ProviderError(
                backend.name, model,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(backend.name, model, f"unparseable body: {e}")

        text = self._extract_text(body)
        if not text.strip():
            raise ProviderError(backend.name, model, "empty completion")
        return text

    @staticmethod
    def _extract_text(body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        text = first.get("text")
        return text if isinstance(text, str) else ""

    def _redact(self, text: str) -> str:
        return redact(text, [backend.api_key for backend in self.backends])
