"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Application
    app_name: str = "DocDraft"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Provider credentials (absence disables every model of that provider)
    openai_api_key: SecretStr | None = Field(
        default=None, validation_alias=AliasChoices("openai_api_key")
    )
    anthropic_api_key: SecretStr | None = Field(
        default=None, validation_alias=AliasChoices("anthropic_api_key")
    )
    google_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("google_api_key", "gemini_api_key"),
    )
    huggingface_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("huggingface_api_key", "hf_token"),
    )

    # Provider tuning
    openai_default_model: str = Field(
        default="gpt-4o",
        validation_alias=AliasChoices("openai_default_model", "openai_model"),
    )
    huggingface_model: str | None = None  # Overrides the hosted model name
    huggingface_loading_retry_delay_seconds: float = 5.0
    huggingface_max_loading_retries: int = 2

    # Timeouts
    llm_timeout_seconds: float = 30.0  # Single HTTP request
    generation_attempt_timeout_seconds: float = 60.0  # One candidate, retries included

    # Circuit breaker
    circuit_breaker_fail_max: int = 5
    circuit_breaker_timeout: float = 60.0

    # Document templates
    templates_path: str = "./templates"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Tracing
    tracing_enabled: bool = False
    tracing_console_export: bool = False
    tracing_sample_rate: float = 1.0
    otlp_endpoint: str | None = None  # e.g. http://localhost:4318


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
