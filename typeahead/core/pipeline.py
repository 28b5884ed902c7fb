"""Debounced, generation-guarded suggestion pipeline.

One trigger cycle: surface change -> debounce -> extract context -> build
prompts -> completion request -> quality filter -> (one retry) -> overlay.

The generation counter is the only concurrency guard. It increases on every
surface change, dismiss, accept and stop, and every asynchronous continuation
compares the generation it captured against the live value before touching the
overlay or pipeline state. Stale responses are dropped, never cancelled.
"""

import asyncio
import logging
from collections.abc import Coroutine
from enum import Enum
from typing import Any

from .completion.service import CompletionService
from .context import ContextExtractor, WritingContext
from .debounce import Debouncer
from .errors import CompletionServiceError, is_disabled_error
from .overlay import SuggestionOverlay
from .prompts import PromptBuilder
from .quality import QualityFilter
from .surface import TextInjector, TextSurface, Unsubscribe

logger = logging.getLogger("typeahead.pipeline")

DEFAULT_DEBOUNCE_SECONDS = 0.5
MIN_ACTIVE_SENTENCE_CHARS = 10


class PipelineState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    AWAITING_FIRST = "awaiting_first"
    AWAITING_RETRY = "awaiting_retry"
    SETTLED = "settled"


class SuggestionPipeline:
    """Turns surface edits into at most one authoritative suggestion at a time."""

    def __init__(
        self,
        overlay: SuggestionOverlay,
        service: CompletionService,
        injector: TextInjector | None = None,
        *,
        extractor: ContextExtractor | None = None,
        prompt_builder: PromptBuilder | None = None,
        quality_filter: QualityFilter | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        min_sentence_chars: int = MIN_ACTIVE_SENTENCE_CHARS,
    ) -> None:
        self._overlay = overlay
        self._service = service
        self._injector = injector
        self._extractor = extractor or ContextExtractor()
        self._prompts = prompt_builder or PromptBuilder()
        self._filter = quality_filter or QualityFilter()
        self._min_sentence_chars = min_sentence_chars

        self._generation = 0
        self._state = PipelineState.IDLE
        self._surface: TextSurface | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._debouncer = Debouncer(debounce_seconds, self._on_debounce)
        self._tasks: set[asyncio.Task[None]] = set()

        self._overlay.set_accept_handler(self._on_accept)

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    # -- Public API ------------------------------------------------------

    def start(self, surface: TextSurface) -> None:
        """Begin observing `surface` and triggering suggestions."""
        if self._unsubscribe is not None:
            self.stop()
        self._surface = surface
        self._overlay.attach(surface)
        self._unsubscribe = surface.subscribe(self._on_surface_change)
        self._state = PipelineState.IDLE
        logger.info("Suggestion pipeline started")

    def stop(self) -> None:
        """Stop observing, cancel everything in flight and hide the overlay."""
        self._advance()
        self._debouncer.cancel()
        self._overlay.hide()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._state = PipelineState.IDLE
        logger.info("Suggestion pipeline stopped")

    def dismiss(self) -> None:
        """Drop the current suggestion and any pending work; keep observing."""
        self._advance()
        self._debouncer.cancel()
        self._overlay.hide()
        self._state = PipelineState.IDLE

    def accept(self) -> bool:
        """Accept the visible suggestion, if any."""
        return self._overlay.accept()

    # -- Event handlers --------------------------------------------------

    def _on_surface_change(self) -> None:
        self._overlay.hide()
        self._advance()
        self._debouncer.trigger()
        self._state = PipelineState.PENDING

    def _on_accept(self, text: str) -> None:
        self._debouncer.cancel()
        self._advance()
        self._state = PipelineState.IDLE
        if self._injector is None:
            return
        try:
            self._injector.insert(text)
        except Exception:
            logger.exception("Text injection failed")

    def _on_debounce(self) -> None:
        try:
            self._begin_cycle()
        except Exception:
            logger.exception("Suggestion cycle failed before the request")
            self._overlay.hide()
            self._state = PipelineState.IDLE

    def _begin_cycle(self) -> None:
        surface = self._surface
        context = self._extractor.extract(surface) if surface is not None else None
        if context is None or len(context.active_sentence) < self._min_sentence_chars:
            logger.debug("No usable context at cursor; skipping cycle")
            self._state = PipelineState.IDLE
            return

        my_gen = self._generation
        system_prompt = self._prompts.build_system(context.detected_tone)
        user_prompt = self._prompts.build_user(context)

        self._overlay.show_loading()
        self._state = PipelineState.AWAITING_FIRST
        self._spawn(self._complete(my_gen, context, system_prompt, user_prompt))

    # -- Cycle -----------------------------------------------------------

    async def _complete(self, my_gen: int, context: WritingContext, system_prompt: str, user_prompt: str) -> None:
        try:
            await self._run_attempts(my_gen, context, system_prompt, user_prompt)
        except Exception:
            logger.exception("Suggestion cycle failed")
            if self._is_current(my_gen):
                self._overlay.hide()
                self._state = PipelineState.SETTLED

    async def _run_attempts(
        self, my_gen: int, context: WritingContext, system_prompt: str, user_prompt: str
    ) -> None:
        candidate = await self._fetch(my_gen, system_prompt, user_prompt)
        if candidate is None:
            return

        result = self._filter.validate(candidate, context)
        if result.valid:
            self._overlay.show(candidate)
            self._state = PipelineState.SETTLED
            return

        logger.debug("Quality reject (%s, score=%d); retrying", result.label, result.score)
        self._state = PipelineState.AWAITING_RETRY
        retry = await self._fetch(my_gen, system_prompt, self._prompts.build_retry(user_prompt))
        if retry is None:
            return

        retry_result = self._filter.validate(retry, context)
        if retry_result.valid:
            self._overlay.show(retry)
        else:
            logger.debug("Retry also rejected (%s, score=%d); suppressing", retry_result.label, retry_result.score)
            self._overlay.hide()
        self._state = PipelineState.SETTLED

    async def _fetch(self, my_gen: int, system_prompt: str, user_prompt: str) -> str | None:
        """Request a completion. Returns None when stale or failed (overlay already handled)."""
        try:
            text = await self._service.request(system_prompt, user_prompt)
        except CompletionServiceError as e:
            if not self._is_current(my_gen):
                return None
            self._overlay.hide()
            self._state = PipelineState.SETTLED
            if not is_disabled_error(e):
                logger.warning("Completion request failed: %s", e)
            return None

        if not self._is_current(my_gen):
            logger.debug("Dropping stale completion (generation %d)", my_gen)
            return None
        return text or ""

    # -- Helpers ---------------------------------------------------------

    def _advance(self) -> None:
        self._generation += 1

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
