"""Shared constants and value types for the completion layer."""

from dataclasses import dataclass

DEFAULT_MAX_TOKENS = 100
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 15.0

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-haiku-4-5-20251001",
    "ollama": "llama3",
    "mock": "mock",
}

DEFAULT_OLLAMA_URL = "http://localhost:11434"

RESULT_TYPE = "COMPLETION_RESULT"
ERROR_TYPE = "COMPLETION_ERROR"


@dataclass
class ServiceStatus:
    """Snapshot of a completion service's configuration."""

    provider: str
    model: str
    enabled: bool
    cached_entries: int = 0
