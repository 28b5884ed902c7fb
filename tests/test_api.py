"""Tests for the completion server endpoints."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from typeahead.api.completion import get_completion_service
from typeahead.core.completion import CompletionCache, CompletionProvider, ProviderCompletionService
from typeahead.main import app


def _service(text: str = "reveals a trend.") -> ProviderCompletionService:
    provider = MagicMock(spec=CompletionProvider)
    provider.name = "fake"
    provider.model = "fake-1"
    provider.complete = AsyncMock(return_value=text)
    provider.close = AsyncMock()
    return ProviderCompletionService(provider, cache=CompletionCache())


@pytest.fixture
def service() -> ProviderCompletionService:
    return _service()


@pytest.fixture
def client(service: ProviderCompletionService) -> Iterator[TestClient]:
    app.dependency_overrides[get_completion_service] = lambda: service
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["content-type"] == "application/json"


class TestCompletionEndpoint:
    def test_result(self, client: TestClient) -> None:
        response = client.post("/completion", json={"system_prompt": "sys", "user_prompt": "usr"})
        assert response.status_code == 200
        assert response.json() == {"type": "COMPLETION_RESULT", "text": "reveals a trend."}

    def test_disabled(self, client: TestClient, service: ProviderCompletionService) -> None:
        service.enabled = False
        response = client.post("/completion", json={"system_prompt": "sys", "user_prompt": "usr"})
        assert response.status_code == 200
        assert response.json() == {"type": "COMPLETION_ERROR", "error": "disabled"}

    def test_provider_failure(self, client: TestClient, service: ProviderCompletionService) -> None:
        service.provider.complete.side_effect = RuntimeError("quota exceeded")  # type: ignore[attr-defined]
        response = client.post("/completion", json={"system_prompt": "sys", "user_prompt": "usr"})
        data = response.json()
        assert data["type"] == "COMPLETION_ERROR"
        assert "quota exceeded" in data["error"]
        assert "text" not in data

    def test_missing_field_rejected(self, client: TestClient) -> None:
        response = client.post("/completion", json={"system_prompt": "sys"})
        assert response.status_code == 422


class TestStatusEndpoints:
    def test_status(self, client: TestClient, service: ProviderCompletionService) -> None:
        client.post("/completion", json={"system_prompt": "sys", "user_prompt": "usr"})
        response = client.get("/completion/status")
        assert response.json() == {"provider": "fake", "model": "fake-1", "enabled": True, "cached_entries": 1}

    def test_toggle_enabled(self, client: TestClient, service: ProviderCompletionService) -> None:
        response = client.put("/completion/enabled", json={"enabled": False})
        assert response.status_code == 200
        assert response.json()["enabled"] is False
        assert service.enabled is False

        response = client.post("/completion", json={"system_prompt": "sys", "user_prompt": "usr"})
        assert response.json()["error"] == "disabled"

        client.put("/completion/enabled", json={"enabled": True})
        assert service.enabled is True
