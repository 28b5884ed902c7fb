"""Construct providers and services from settings."""

import logging

import httpx

from ..config import LLMConfig, Settings
from .cache import CompletionCache
from .provider import CompletionProvider
from .remote import RemoteCompletionService
from .service import CompletionService, ProviderCompletionService
from .types import DEFAULT_MODELS, DEFAULT_OLLAMA_URL

logger = logging.getLogger("typeahead.completion")


def _require_api_key(config: LLMConfig) -> str:
    if not config.api_key:
        raise ValueError("LLM API key is required. Set llm.api_key in config.yml")
    return config.api_key.get_secret_value()


def create_provider(config: LLMConfig, http_client: httpx.AsyncClient | None = None) -> CompletionProvider:
    """Get the configured completion provider."""
    model = config.model or DEFAULT_MODELS.get(config.provider, "")

    if config.provider == "openai":
        from .providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=_require_api_key(config), model=model, base_url=config.base_url)
    elif config.provider == "anthropic":
        from .providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=_require_api_key(config), model=model, base_url=config.base_url)
    elif config.provider == "ollama":
        from .providers.ollama import OllamaProvider

        return OllamaProvider(
            model=model,
            base_url=config.base_url or DEFAULT_OLLAMA_URL,
            http_client=http_client,
            timeout=config.timeout,
        )
    elif config.provider == "mock":
        from .providers.mock import MockProvider

        return MockProvider()
    else:
        raise ValueError(f"Unsupported LLM provider: {config.provider}")


def create_completion_service(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    *,
    allow_remote: bool = True,
) -> CompletionService:
    """Build the service the pipeline talks to.

    With ``completion.remote_url`` set (and `allow_remote`), requests go to a
    running completion server; otherwise a provider is called in-process.
    """
    completion = settings.completion
    if allow_remote and completion.remote_url:
        logger.info("Using remote completion server at %s", completion.remote_url)
        return RemoteCompletionService(completion.remote_url, http_client=http_client, timeout=settings.llm.timeout)

    provider = create_provider(settings.llm, http_client)
    cache = (
        CompletionCache(max_entries=completion.cache_size, key_chars=completion.cache_key_chars)
        if completion.cache_size > 0
        else None
    )
    logger.info("Using %s provider (model %s)", provider.name, provider.model)
    return ProviderCompletionService(
        provider,
        cache=cache,
        enabled=completion.enabled,
        max_tokens=settings.llm.max_tokens,
        temperature=settings.llm.temperature,
    )
