"""Anthropic completion provider implementation."""

from typing import Any

import anthropic

from ..provider import CompletionProvider
from ..types import DEFAULT_MAX_TOKENS, DEFAULT_MODELS, DEFAULT_TEMPERATURE


class AnthropicProvider(CompletionProvider):
    """Anthropic Claude messages provider."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str = DEFAULT_MODELS["anthropic"], base_url: str | None = None):
        self.client = anthropic.AsyncAnthropic(api_key=api_key, base_url=base_url)
        self.model = model

    def _parse_response(self, response: Any) -> str:
        """Concatenate the text blocks of a messages response."""
        content = ""
        for block in response.content:
            if block.type == "text":
                content += block.text
        return content

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        # Anthropic takes the system prompt as a separate parameter.
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=temperature,
        )
        return self._parse_response(response).strip()

    async def close(self) -> None:
        await self.client.close()
