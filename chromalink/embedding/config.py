"""
Embedding pipeline configuration.

Provides Pydantic settings for the Gemini embedding provider including
model selection, declared dimension, batching and request pacing.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingConfig(BaseSettings):
    """
    Configuration for the embedding provider and batch pipeline.

    Settings can be overridden via environment variables prefixed with EMBEDDING_.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API base URL",
    )
    model_name: str = Field(
        default="models/gemini-embedding-exp-03-07",
        description="Gemini embedding model resource name",
    )
    embedding_dim: int = Field(
        default=3072,
        ge=1,
        description="Declared embedding dimension checked against every response",
    )

    # Processing configuration
    max_batch_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum number of texts submitted as one retried unit",
    )
    request_pause_ms: int = Field(
        default=100,
        ge=0,
        description="Pause after every provider call to respect rate limits (ms)",
    )

    @property
    def request_pause_seconds(self) -> float:
        return self.request_pause_ms / 1000

    @property
    def short_model_name(self) -> str:
        """Model name without the ``models/`` resource prefix."""
        return self.model_name.removeprefix("models/")
