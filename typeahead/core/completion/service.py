"""Completion service contract consumed by the suggestion pipeline."""

import logging
from abc import ABC, abstractmethod

from ..errors import CompletionDisabledError, CompletionServiceError
from .cache import CompletionCache
from .provider import CompletionProvider
from .types import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, ServiceStatus

logger = logging.getLogger("typeahead.completion")


class CompletionService(ABC):
    """Answers one system/user prompt pair with continuation text."""

    @abstractmethod
    async def request(self, system_prompt: str, user_prompt: str) -> str:
        """Return the completion text.

        Raises:
            CompletionDisabledError: completions are switched off.
            CompletionServiceError: the request failed.
        """
        pass

    async def close(self) -> None:
        return None


class ProviderCompletionService(CompletionService):
    """In-process service: enabled switch, LRU cache, then a provider call."""

    def __init__(
        self,
        provider: CompletionProvider,
        *,
        cache: CompletionCache | None = None,
        enabled: bool = True,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.enabled = enabled
        self.max_tokens = max_tokens
        self.temperature = temperature

    def status(self) -> ServiceStatus:
        return ServiceStatus(
            provider=self.provider.name,
            model=self.provider.model,
            enabled=self.enabled,
            cached_entries=len(self.cache) if self.cache is not None else 0,
        )

    async def request(self, system_prompt: str, user_prompt: str) -> str:
        if not self.enabled:
            raise CompletionDisabledError()

        cache = self.cache
        key = ""
        if cache is not None:
            key = cache.key(system_prompt, user_prompt)
            hit = cache.get(key)
            if hit is not None:
                logger.debug("Completion cache hit")
                return hit

        try:
            text = await self.provider.complete(
                system_prompt,
                user_prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except CompletionServiceError as e:
            logger.error("Completion provider %s failed: %s", self.provider.name, e)
            raise
        except Exception as e:
            logger.error("Completion provider %s failed: %s", self.provider.name, e)
            raise CompletionServiceError(f"{self.provider.name} request failed: {e}") from e

        text = (text or "").strip()
        if text and cache is not None:
            cache.put(key, text)
        return text

    async def close(self) -> None:
        await self.provider.close()
