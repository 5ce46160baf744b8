"""
Gemini embedding provider.

Calls the ``embedContent`` endpoint once per text and maps transport,
status and decode failures onto the chromalink error taxonomy. Retries
are not done here; the EmbeddingPipeline governs whole batches.
"""

from typing import Any, Protocol

import httpx
import structlog
from pydantic import SecretStr

from chromalink.config.settings import Settings, get_settings
from chromalink.embedding.config import EmbeddingConfig
from chromalink.errors import ApiError, ConfigError, ResponseFormatError
from chromalink.retry.policy import to_transport_error

logger = structlog.get_logger(__name__)


class EmbeddingProvider(Protocol):
    """Anything that turns one text into one vector."""

    async def embed_text(self, text: str) -> list[float]: ...


class GeminiEmbeddingProvider:
    """
    Async client for the Gemini ``embedContent`` API.

    Usage:
        async with GeminiEmbeddingProvider(api_key) as provider:
            vector = await provider.embed_text("ChromaDB is a vector database")
    """

    def __init__(
        self,
        api_key: str | SecretStr | None = None,
        config: EmbeddingConfig | None = None,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: Gemini API key (falls back to settings.google_api_key)
            config: Embedding configuration (uses defaults if None)
            settings: Application settings for key and timeouts
            client: Preconfigured httpx client (created if None)
        """
        settings = settings or get_settings()
        self._config = config or EmbeddingConfig()

        key = api_key if api_key is not None else settings.google_api_key
        if isinstance(key, SecretStr):
            key = key.get_secret_value()
        if not key:
            raise ConfigError("A Gemini API key is required (set GOOGLE_API_KEY)")
        self._api_key = key

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                settings.request_timeout_seconds,
                connect=settings.connection_timeout_seconds,
            ),
        )

    async def __aenter__(self) -> "GeminiEmbeddingProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def endpoint(self) -> str:
        return f"{self._config.api_base.rstrip('/')}/{self._config.model_name}:embedContent"

    async def embed_text(self, text: str) -> list[float]:
        """
        Embed a single text.

        Raises:
            TransportError: On network failure (retryable for timeouts/connect errors)
            ApiError: On a non-2xx response
            ResponseFormatError: If the body has no ``embedding.values`` list
        """
        body = {"content": {"parts": [{"text": text}]}}
        try:
            response = await self._client.post(
                self.endpoint,
                params={"key": self._api_key},
                json=body,
            )
        except httpx.HTTPError as e:
            raise to_transport_error(e, "Gemini embedContent") from e

        if not response.is_success:
            raise ApiError(
                f"Gemini API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            values = response.json()["embedding"]["values"]
            if not isinstance(values, list):
                raise TypeError(f"values is {type(values).__name__}, not a list")
            return [float(v) for v in values]
        except (ValueError, KeyError, TypeError) as e:
            raise ResponseFormatError(f"Invalid embedding response format: {e}") from e
