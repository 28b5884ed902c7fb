"""Local Ollama completion provider."""

import logging
from typing import Any

import httpx

from ...errors import CompletionServiceError
from ..provider import CompletionProvider
from ..types import DEFAULT_MAX_TOKENS, DEFAULT_MODELS, DEFAULT_OLLAMA_URL, DEFAULT_TEMPERATURE, DEFAULT_TIMEOUT

logger = logging.getLogger("typeahead.completion.ollama")


class OllamaProvider(CompletionProvider):
    """Non-streaming client for Ollama's ``/api/generate``."""

    name = "ollama"

    def __init__(
        self,
        model: str = DEFAULT_MODELS["ollama"],
        base_url: str = DEFAULT_OLLAMA_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    def _build_payload(
        self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float
    ) -> dict[str, Any]:
        # /api/generate has no separate system slot here; the prompts are joined.
        return {
            "model": self.model,
            "prompt": f"{system_prompt}\n\n{user_prompt}",
            "stream": False,
            "options": {"num_predict": max_tokens, "temperature": temperature},
        }

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        client = self._get_client()
        try:
            response = await client.post(
                f"{self.base_url}/api/generate",
                json=self._build_payload(system_prompt, user_prompt, max_tokens, temperature),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Ollama HTTP error: %s %s", e.response.status_code, e.response.text)
            raise CompletionServiceError(f"Ollama returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("Ollama request failed: %s", e)
            raise CompletionServiceError(f"Ollama request failed: {e}") from e

        data = response.json()
        return str(data.get("response") or "").strip()

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
