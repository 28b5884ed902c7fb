"""Offline provider returning canned continuations.

Useful for demos and for exercising the quality filter: several of these
phrases are exactly the generic filler the filter penalises.
"""

import asyncio
import random

from ..provider import CompletionProvider
from ..types import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE

MOCK_PHRASES: tuple[str, ...] = (
    " This approach has proven effective across a wide range of real-world applications.",
    " The evidence strongly supports this conclusion and warrants further investigation.",
    " It is worth considering how this might affect the broader context of the discussion.",
    " Further analysis will likely reveal additional insights worth exploring in depth.",
    " This pattern appears consistently across similar cases and merits careful attention.",
    " The implications of this finding extend well beyond the immediate scope of the work.",
    " Understanding this dynamic is essential for making informed decisions going forward.",
)

DEFAULT_MOCK_DELAY = 0.4


class MockProvider(CompletionProvider):
    name = "mock"
    model = "mock"

    def __init__(
        self,
        phrases: tuple[str, ...] = MOCK_PHRASES,
        delay: float = DEFAULT_MOCK_DELAY,
        rng: random.Random | None = None,
    ) -> None:
        if not phrases:
            raise ValueError("MockProvider needs at least one phrase")
        self.phrases = phrases
        self.delay = delay
        self._rng = rng or random.Random()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return self._rng.choice(self.phrases)
