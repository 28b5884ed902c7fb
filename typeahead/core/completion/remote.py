"""HTTP client for a running completion server."""

import logging
from typing import Any

import httpx

from ..errors import DISABLED_MESSAGE, CompletionDisabledError, CompletionServiceError
from .service import CompletionService
from .types import DEFAULT_TIMEOUT, ERROR_TYPE, RESULT_TYPE

logger = logging.getLogger("typeahead.completion.remote")


class RemoteCompletionService(CompletionService):
    """Async client for the ``POST /completion`` endpoint."""

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def request(self, system_prompt: str, user_prompt: str) -> str:
        client = self._get_client()
        try:
            response = await client.post(
                f"{self.base_url}/completion",
                json={"system_prompt": system_prompt, "user_prompt": user_prompt},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Completion server HTTP error: %s %s", e.response.status_code, e.response.text)
            raise CompletionServiceError(f"Completion server returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("Completion server request failed: %s", e)
            raise CompletionServiceError(f"Completion server request failed: {e}") from e

        data: dict[str, Any] = response.json()
        kind = data.get("type")
        if kind == RESULT_TYPE:
            return str(data.get("text") or "")
        if kind == ERROR_TYPE:
            error = str(data.get("error") or "unknown error")
            if error == DISABLED_MESSAGE:
                raise CompletionDisabledError()
            raise CompletionServiceError(error)
        raise CompletionServiceError(f"Unexpected completion response type: {kind!r}")

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
