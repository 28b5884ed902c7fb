# Completion service layer for Typeahead

from .cache import CompletionCache
from .factory import create_completion_service, create_provider
from .provider import CompletionProvider
from .remote import RemoteCompletionService
from .service import CompletionService, ProviderCompletionService
from .types import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODELS,
    DEFAULT_TEMPERATURE,
    ERROR_TYPE,
    RESULT_TYPE,
    ServiceStatus,
)

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODELS",
    "DEFAULT_TEMPERATURE",
    "ERROR_TYPE",
    "RESULT_TYPE",
    "CompletionCache",
    "CompletionProvider",
    "CompletionService",
    "ProviderCompletionService",
    "RemoteCompletionService",
    "ServiceStatus",
    "create_completion_service",
    "create_provider",
]
