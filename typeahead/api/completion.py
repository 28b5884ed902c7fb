"""HTTP completion endpoints backing remote editors."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette.requests import HTTPConnection

from ..core.completion import ERROR_TYPE, RESULT_TYPE, ProviderCompletionService
from ..core.errors import CompletionServiceError

logger = logging.getLogger("typeahead.api.completion")

router = APIRouter()


class CompletionRequest(BaseModel):
    """Prompt pair from a client."""

    system_prompt: str
    user_prompt: str


class CompletionResponse(BaseModel):
    type: str
    text: str | None = None
    error: str | None = None


class EnabledUpdate(BaseModel):
    enabled: bool


class StatusResponse(BaseModel):
    provider: str
    model: str
    enabled: bool
    cached_entries: int


# --- Dependency injection helpers ---


def get_completion_service(conn: HTTPConnection) -> ProviderCompletionService:
    """Get the completion service from app state."""
    return conn.app.state.completion_service  # type: ignore[no-any-return]


@router.post("/completion", response_model=CompletionResponse, response_model_exclude_none=True)
async def complete(
    request: CompletionRequest,
    service: ProviderCompletionService = Depends(get_completion_service),
) -> CompletionResponse:
    """Complete one prompt pair.

    Failures are reported in the payload, not as HTTP errors, so clients can
    tell a disabled service apart from a broken one.
    """
    try:
        text = await service.request(request.system_prompt, request.user_prompt)
    except CompletionServiceError as e:
        return CompletionResponse(type=ERROR_TYPE, error=str(e))
    return CompletionResponse(type=RESULT_TYPE, text=text)


@router.get("/completion/status", response_model=StatusResponse)
async def completion_status(service: ProviderCompletionService = Depends(get_completion_service)) -> StatusResponse:
    status = service.status()
    return StatusResponse(
        provider=status.provider,
        model=status.model,
        enabled=status.enabled,
        cached_entries=status.cached_entries,
    )


@router.put("/completion/enabled", response_model=StatusResponse)
async def set_enabled(
    update: EnabledUpdate,
    service: ProviderCompletionService = Depends(get_completion_service),
) -> StatusResponse:
    """Switch completions on or off; disabled requests answer ``"disabled"``."""
    service.enabled = update.enabled
    logger.info("Completions %s", "enabled" if update.enabled else "disabled")
    return await completion_status(service)
