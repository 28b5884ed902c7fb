"""Completion provider abstract base class."""

from abc import ABC, abstractmethod

from .types import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE


class CompletionProvider(ABC):
    """Abstract base class for text-completion backends."""

    name: str = "provider"
    model: str = ""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        """Return the raw continuation text for the prompt pair."""
        pass

    async def close(self) -> None:
        """Release any network resources held by the provider."""
        return None
