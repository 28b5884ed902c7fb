"""OpenAI completion provider implementation."""

from typing import Any

import openai

from ..provider import CompletionProvider
from ..types import DEFAULT_MAX_TOKENS, DEFAULT_MODELS, DEFAULT_TEMPERATURE


class OpenAIProvider(CompletionProvider):
    """OpenAI chat-completions provider."""

    name = "openai"

    def __init__(self, api_key: str, model: str = DEFAULT_MODELS["openai"], base_url: str | None = None):
        self.client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model

    def _build_messages(self, system_prompt: str, user_prompt: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    def _parse_response(self, response: Any) -> str:
        """Pull the first choice's text out of a chat completion."""
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=self._build_messages(system_prompt, user_prompt),  # type: ignore[arg-type]
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return self._parse_response(response).strip()

    async def close(self) -> None:
        await self.client.close()
