"""Tests for the suggestion pipeline lifecycle."""

# pyright: reportPrivateUsage=false

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from typeahead.core.completion.providers.mock import MOCK_PHRASES
from typeahead.core.errors import CompletionDisabledError, CompletionServiceError
from typeahead.core.overlay import OverlayState, SuggestionOverlay
from typeahead.core.pipeline import PipelineState, SuggestionPipeline
from typeahead.core.prompts import RETRY_NOTE
from typeahead.core.surface import SurfaceLayout, TextInjector
from typeahead.surfaces.grid import GridSurface
from tests.helpers import RecordingInjector, RecordingRenderer, ScriptedService, settle

GENERIC = MOCK_PHRASES[0].strip()
GOOD = "reveals a statistically significant interaction between the two variables at p < 0.05."
ALSO_GOOD = "which suggests a strong correlation between the two variables."


def _build(
    service: ScriptedService,
    text: str = "The regression analysis",
    injector: TextInjector | None = None,
    **kwargs: object,
) -> tuple[SuggestionPipeline, SuggestionOverlay, RecordingRenderer, GridSurface]:
    renderer = RecordingRenderer(auto_finish=True)
    overlay = SuggestionOverlay(renderer, frame_interval=60.0, hide_fallback=0.01, accept_duration=0.01)
    surface = GridSurface(text)
    pipeline = SuggestionPipeline(overlay, service, injector, debounce_seconds=10.0, **kwargs)  # type: ignore[arg-type]
    pipeline.start(surface)
    return pipeline, overlay, renderer, surface


def _trigger(pipeline: SuggestionPipeline, surface: GridSurface) -> None:
    """Simulate an edit and let the debounce elapse."""
    surface.notify()
    assert pipeline._debouncer.flush() is True


async def _wait_for_calls(service: ScriptedService, count: int) -> None:
    while len(service.calls) < count:
        await asyncio.sleep(0)


class TestSuggestionCycle:
    @pytest.mark.asyncio
    async def test_retry_after_low_score(self) -> None:
        service = ScriptedService(GENERIC, GOOD)
        pipeline, overlay, renderer, surface = _build(service)

        _trigger(pipeline, surface)
        assert pipeline.state is PipelineState.AWAITING_FIRST
        await settle(pipeline)

        assert renderer.renders == [(OverlayState.LOADING, ""), (OverlayState.VISIBLE, GOOD)]
        assert overlay.get_text() == GOOD
        assert pipeline.state is PipelineState.SETTLED
        assert len(service.calls) == 2
        first_user, retry_user = service.calls[0][1], service.calls[1][1]
        assert first_user.endswith("The regression analysis")
        assert retry_user == first_user + RETRY_NOTE
        assert service.calls[0][0] == service.calls[1][0]
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_valid_first_candidate_shown(self) -> None:
        service = ScriptedService(ALSO_GOOD)
        pipeline, overlay, _, surface = _build(service)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert overlay.get_text() == ALSO_GOOD
        assert len(service.calls) == 1
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_empty_first_candidate_retries(self) -> None:
        service = ScriptedService("", ALSO_GOOD)
        pipeline, overlay, _, surface = _build(service)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert len(service.calls) == 2
        assert overlay.get_text() == ALSO_GOOD
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_both_candidates_rejected(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="typeahead.pipeline")
        service = ScriptedService(GENERIC, "In conclusion, the data speaks for itself.")
        pipeline, overlay, _, surface = _build(service)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert overlay.state is OverlayState.HIDDEN
        assert overlay.is_visible() is False
        assert pipeline.state is PipelineState.SETTLED
        messages = [r.getMessage() for r in caplog.records]
        assert any("Retry also rejected" in m and "banned_phrase" in m for m in messages)
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_short_active_sentence_skips_request(self) -> None:
        service = ScriptedService(GOOD)
        pipeline, overlay, renderer, surface = _build(service, text="Results were mixed. Too short")

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert service.calls == []
        assert renderer.renders == []
        assert overlay.state is OverlayState.HIDDEN
        assert pipeline.state is PipelineState.IDLE

    @pytest.mark.asyncio
    async def test_extraction_failure_skips_request(self) -> None:
        service = ScriptedService(GOOD)
        pipeline, _, _, surface = _build(service, text="Hi")

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert service.calls == []
        assert pipeline.state is PipelineState.IDLE


class TestStaleResponses:
    @pytest.mark.asyncio
    async def test_response_after_edit_is_dropped(self) -> None:
        service = ScriptedService(GOOD)
        gate = service.hold(0)
        pipeline, overlay, renderer, surface = _build(service)

        _trigger(pipeline, surface)
        await _wait_for_calls(service, 1)
        surface.notify()
        gate.set()
        await settle(pipeline)

        assert (OverlayState.VISIBLE, GOOD) not in renderer.renders
        assert overlay.is_visible() is False
        assert pipeline.state is PipelineState.PENDING
        assert len(service.calls) == 1
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_retry_after_dismiss_is_dropped(self) -> None:
        service = ScriptedService(GENERIC, GOOD)
        gate = service.hold(1)
        pipeline, overlay, _, surface = _build(service)

        _trigger(pipeline, surface)
        await _wait_for_calls(service, 2)
        assert pipeline.state is PipelineState.AWAITING_RETRY
        pipeline.dismiss()
        gate.set()
        await settle(pipeline)

        assert overlay.is_visible() is False
        assert pipeline.state is PipelineState.IDLE
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_stale_error_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        service = ScriptedService(CompletionServiceError("late failure"))
        gate = service.hold(0)
        pipeline, _, _, surface = _build(service)

        _trigger(pipeline, surface)
        await _wait_for_calls(service, 1)
        pipeline.dismiss()
        gate.set()
        await settle(pipeline)

        assert pipeline.state is PipelineState.IDLE
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        pipeline.stop()


class TestServiceFailures:
    @pytest.mark.asyncio
    async def test_disabled_hides_without_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        service = ScriptedService(CompletionDisabledError())
        pipeline, overlay, renderer, surface = _build(service)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert renderer.renders == [(OverlayState.LOADING, "")]
        assert overlay.state is OverlayState.HIDDEN
        assert pipeline.state is PipelineState.SETTLED
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_service_error_hides_and_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        service = ScriptedService(CompletionServiceError("provider down"))
        pipeline, overlay, _, surface = _build(service)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert overlay.state is OverlayState.HIDDEN
        assert pipeline.state is PipelineState.SETTLED
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "provider down" in warnings[0].getMessage()
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, caplog: pytest.LogCaptureFixture) -> None:
        service = ScriptedService(GOOD)
        broken_filter = MagicMock()
        broken_filter.validate.side_effect = RuntimeError("filter bug")
        pipeline, overlay, _, surface = _build(service, quality_filter=broken_filter)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert overlay.state is OverlayState.HIDDEN
        assert pipeline.state is PipelineState.SETTLED
        assert any(r.levelno == logging.ERROR and r.exc_info for r in caplog.records)
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_layout_failure_is_contained(self, caplog: pytest.LogCaptureFixture) -> None:
        class UnmeasurableSurface(GridSurface):
            def layout(self) -> SurfaceLayout:
                raise RuntimeError("layout unavailable")

        service = ScriptedService(GOOD)
        renderer = RecordingRenderer(auto_finish=True)
        overlay = SuggestionOverlay(renderer, frame_interval=60.0, hide_fallback=0.01)
        surface = UnmeasurableSurface("The regression analysis")
        pipeline = SuggestionPipeline(overlay, service, debounce_seconds=10.0)
        pipeline.start(surface)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert pipeline.state is PipelineState.IDLE
        assert overlay.state is OverlayState.HIDDEN
        assert service.calls == []
        errors = [r for r in caplog.records if r.levelno == logging.ERROR and r.exc_info]
        assert len(errors) == 1
        assert "layout unavailable" in str(errors[0].exc_info[1])
        pipeline.stop()


class TestUserActions:
    @pytest.mark.asyncio
    async def test_accept_injects_text(self) -> None:
        injector = RecordingInjector()
        pipeline, overlay, _, surface = _build(ScriptedService(GOOD), injector=injector)
        _trigger(pipeline, surface)
        await settle(pipeline)
        generation = pipeline._generation

        assert pipeline.accept() is True

        assert injector.inserted == [GOOD]
        assert overlay.state is OverlayState.ACCEPTING
        assert pipeline.state is PipelineState.IDLE
        assert pipeline._generation == generation + 1
        assert pipeline._debouncer.armed is False
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_accept_into_surface_rearms(self) -> None:
        service = ScriptedService(GOOD)
        renderer = RecordingRenderer(auto_finish=True)
        overlay = SuggestionOverlay(renderer, frame_interval=60.0, hide_fallback=0.01, accept_duration=0.01)
        surface = GridSurface("The regression analysis")
        pipeline = SuggestionPipeline(overlay, service, surface, debounce_seconds=10.0)
        pipeline.start(surface)
        _trigger(pipeline, surface)
        await settle(pipeline)

        assert pipeline.accept() is True

        assert surface.text == f"The regression analysis {GOOD}"
        assert pipeline.state is PipelineState.PENDING
        assert pipeline._debouncer.armed is True
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_accept_without_suggestion(self) -> None:
        injector = RecordingInjector()
        pipeline, _, _, _ = _build(ScriptedService(), injector=injector)
        assert pipeline.accept() is False
        assert injector.inserted == []
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_injector_errors_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        injector = RecordingInjector(error=RuntimeError("read-only"))
        pipeline, _, _, surface = _build(ScriptedService(GOOD), injector=injector)
        _trigger(pipeline, surface)
        await settle(pipeline)

        assert pipeline.accept() is True
        assert any("Text injection failed" in r.getMessage() for r in caplog.records)
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_dismiss_hides_suggestion(self) -> None:
        pipeline, overlay, _, surface = _build(ScriptedService(GOOD))
        _trigger(pipeline, surface)
        await settle(pipeline)
        assert overlay.is_visible() is True

        pipeline.dismiss()

        assert overlay.is_visible() is False
        assert pipeline.state is PipelineState.IDLE
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_dismiss_cancels_pending_debounce(self) -> None:
        pipeline, _, _, surface = _build(ScriptedService(GOOD))
        surface.notify()
        assert pipeline.state is PipelineState.PENDING

        pipeline.dismiss()

        assert pipeline._debouncer.armed is False
        assert pipeline.state is PipelineState.IDLE
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_edit_hides_visible_suggestion(self) -> None:
        pipeline, overlay, _, surface = _build(ScriptedService(GOOD))
        _trigger(pipeline, surface)
        await settle(pipeline)

        surface.set_text("The regression analysis clearly")

        assert overlay.is_visible() is False
        assert pipeline.state is PipelineState.PENDING
        pipeline.stop()

    @pytest.mark.asyncio
    async def test_stop_detaches(self) -> None:
        service = ScriptedService(GOOD)
        pipeline, _, _, surface = _build(service)
        assert pipeline.running is True

        pipeline.stop()
        generation = pipeline._generation
        surface.notify()

        assert pipeline.running is False
        assert pipeline.state is PipelineState.IDLE
        assert pipeline._generation == generation
        assert pipeline._debouncer.armed is False

    @pytest.mark.asyncio
    async def test_restart_after_stop(self) -> None:
        service = ScriptedService(GOOD)
        pipeline, overlay, _, surface = _build(service)
        pipeline.stop()
        pipeline.start(surface)

        _trigger(pipeline, surface)
        await settle(pipeline)

        assert overlay.get_text() == GOOD
        pipeline.stop()


class TestGeneration:
    @pytest.mark.asyncio
    async def test_every_operation_advances_generation(self) -> None:
        pipeline, _, _, surface = _build(ScriptedService(GOOD, GOOD))
        seen = [pipeline._generation]

        surface.notify()
        seen.append(pipeline._generation)
        pipeline.dismiss()
        seen.append(pipeline._generation)
        _trigger(pipeline, surface)
        seen.append(pipeline._generation)
        await settle(pipeline)
        pipeline.accept()
        seen.append(pipeline._generation)
        pipeline.stop()
        seen.append(pipeline._generation)

        assert seen == sorted(set(seen))
        assert len(seen) == 6
