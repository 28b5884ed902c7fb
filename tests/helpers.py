"""Shared test helpers for the typeahead test suite."""

# pyright: reportPrivateUsage=false

import asyncio
from collections.abc import Callable
from unittest.mock import MagicMock

import httpx

from typeahead.core.completion import CompletionService
from typeahead.core.context import WritingContext
from typeahead.core.overlay import OverlayRenderer, OverlayState
from typeahead.core.pipeline import SuggestionPipeline
from typeahead.core.surface import FontMetrics, Rect


def make_mock_response(
    status_code: int = 200,
    json_data: dict[str, object] | None = None,
) -> MagicMock:
    """Create a mock httpx.Response."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = json_data or {}
    response.text = ""
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            message=f"HTTP {status_code}",
            request=MagicMock(),
            response=response,
        )
    else:
        response.raise_for_status.return_value = None
    return response


def make_context(active_sentence: str = "The regression analysis", full_context: str | None = None) -> WritingContext:
    return WritingContext(
        active_sentence=active_sentence,
        recent_paragraphs=(active_sentence,),
        full_context=active_sentence if full_context is None else full_context,
    )


class ScriptedService(CompletionService):
    """Completion service answering from a script of texts or exceptions.

    ``hold(n)`` returns an event that the n-th request (0-based) waits on.
    """

    def __init__(self, *responses: str | BaseException) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str]] = []
        self._gates: dict[int, asyncio.Event] = {}

    def hold(self, index: int) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[index] = gate
        return gate

    async def request(self, system_prompt: str, user_prompt: str) -> str:
        index = len(self.calls)
        self.calls.append((system_prompt, user_prompt))
        gate = self._gates.get(index)
        if gate is not None:
            await gate.wait()
        response = self.responses[index] if index < len(self.responses) else ""
        if isinstance(response, BaseException):
            raise response
        return response


class RecordingRenderer(OverlayRenderer):
    """Overlay renderer that records every call.

    With ``auto_finish=False`` the fade-out callback is kept in
    ``pending_fades`` so tests can deliver it late (or never).
    """

    def __init__(self, auto_finish: bool = False) -> None:
        self.auto_finish = auto_finish
        self.calls: list[tuple[str, object]] = []
        self.pending_fades: list[Callable[[], None]] = []
        self.clears = 0

    @property
    def renders(self) -> list[tuple[OverlayState, str]]:
        return [args for name, args in self.calls if name == "render"]  # type: ignore[misc]

    def render(self, state: OverlayState, text: str) -> None:
        self.calls.append(("render", (state, text)))

    def move_to(self, anchor: Rect) -> None:
        self.calls.append(("move_to", anchor))

    def apply_font(self, metrics: FontMetrics) -> None:
        self.calls.append(("apply_font", metrics))

    def fade_out(self, on_finished: Callable[[], None]) -> None:
        self.calls.append(("fade_out", None))
        if self.auto_finish:
            on_finished()
        else:
            self.pending_fades.append(on_finished)

    def clear(self) -> None:
        self.clears += 1
        self.calls.append(("clear", None))


class RecordingInjector:
    def __init__(self, error: Exception | None = None) -> None:
        self.inserted: list[str] = []
        self.error = error

    def insert(self, text: str) -> None:
        if self.error is not None:
            raise self.error
        self.inserted.append(text)


async def settle(pipeline: SuggestionPipeline) -> None:
    """Wait until every completion task spawned by `pipeline` has finished."""
    while pipeline._tasks:
        await asyncio.gather(*list(pipeline._tasks))
    await asyncio.sleep(0)
