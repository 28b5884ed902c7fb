"""Shared test fixtures for the typeahead test suite."""

from unittest.mock import AsyncMock

import httpx
import pytest

from typeahead.core.overlay import SuggestionOverlay
from typeahead.core.quality import QualityFilter
from typeahead.surfaces.grid import GridSurface
from tests.helpers import RecordingRenderer


@pytest.fixture
def mock_http_client() -> AsyncMock:
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def quality_filter() -> QualityFilter:
    return QualityFilter()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def overlay(renderer: RecordingRenderer) -> SuggestionOverlay:
    # Tests drive frames and fades by hand; keep timers out of the way.
    return SuggestionOverlay(renderer, frame_interval=60.0, hide_fallback=0.05, accept_duration=0.05)


@pytest.fixture
def surface() -> GridSurface:
    return GridSurface()
