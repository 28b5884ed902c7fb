"""Application settings.

Values come from, highest precedence first: constructor arguments, ``TYPEAHEAD_``
environment variables (``__`` separates nested keys, e.g.
``TYPEAHEAD_LLM__PROVIDER=openai``), then the YAML file named by
``TYPEAHEAD_CONFIG`` (default ``config.yml`` in the working directory).
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE = Path(os.environ.get("TYPEAHEAD_CONFIG", "config.yml"))

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

LogLevel = Literal["debug", "info", "warning", "error", "critical"]
ProviderName = Literal["openai", "anthropic", "ollama", "mock"]


class AppConfig(BaseModel):
    name: str = "Typeahead"
    version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8484
    cors_origins: list[str] = ["*"]


class LoggingConfig(BaseModel):
    level: LogLevel = "info"
    file: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "warn":
                return "warning"
        return v


class LLMConfig(BaseModel):
    provider: ProviderName = "mock"
    # None selects the provider's default model.
    model: str | None = None
    api_key: SecretStr | None = None
    base_url: str | None = None
    max_tokens: int = 100
    temperature: float = 0.7
    timeout: float = 15.0


class CompletionConfig(BaseModel):
    enabled: bool = True
    cache_size: int = 80
    cache_key_chars: int = 180
    # When set, the editor talks to a running completion server instead of a provider.
    remote_url: str | None = None


class SuggestionsConfig(BaseModel):
    debounce_ms: int = 500
    min_sentence_chars: int = 10
    hide_fallback_ms: int = 200
    accept_duration_ms: int = 130


class Settings(BaseSettings):
    """Typeahead settings loaded from config.yml and the environment."""

    app: AppConfig = AppConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
    llm: LLMConfig = LLMConfig()
    completion: CompletionConfig = CompletionConfig()
    suggestions: SuggestionsConfig = SuggestionsConfig()

    model_config = SettingsConfigDict(
        env_prefix="TYPEAHEAD_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=CONFIG_FILE),
        )


def configure_logging(config: LoggingConfig, *, force: bool = False) -> None:
    """Apply the configured level (and optional log file) to the root logger."""
    level = getattr(logging, config.level.upper())
    if config.file:
        handler: logging.Handler = logging.FileHandler(config.file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=force)
    logging.getLogger("typeahead").setLevel(level)


# Global settings instance
settings = Settings()
