"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, SecretStr, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the chromalink client.

    All settings can be overridden via environment variables.
    Prefix is not used to allow the standard env var names (e.g., CHROMA_HOST).

    Values that cannot be parsed (or fall outside their allowed range) are
    replaced by the field default instead of failing startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ChromaDB
    chroma_host: str = "http://localhost:8000"
    chroma_api_prefix: str = "/api/v2"
    collection_name: str = "documents"

    # Gemini embeddings
    google_api_key: SecretStr | None = None

    # Transport timeouts (milliseconds)
    connection_timeout_ms: int = Field(default=30_000, ge=1)
    request_timeout_ms: int = Field(default=60_000, ge=1)

    # Retry policy
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_delay_ms: int = Field(default=1_000, ge=0)

    # Observability
    metrics_port: int = 8000

    @field_validator(
        "environment",
        "log_level",
        "connection_timeout_ms",
        "request_timeout_ms",
        "max_retries",
        "retry_delay_ms",
        "metrics_port",
        mode="wrap",
    )
    @classmethod
    def _fallback_to_default(cls, value: Any, handler: Any, info: ValidationInfo) -> Any:
        """Use the field default when the supplied value does not validate."""
        if isinstance(value, str) and info.field_name == "log_level":
            value = value.upper()
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].default

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def connection_timeout_seconds(self) -> float:
        return self.connection_timeout_ms / 1000

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000

    @property
    def embeddings_configured(self) -> bool:
        """Check if a Gemini API key is available."""
        return self.google_api_key is not None and bool(
            self.google_api_key.get_secret_value()
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
