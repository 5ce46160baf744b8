"""
Batched embedding generation.

EmbeddingPipeline splits texts into bounded, contiguous batches and submits
each batch through the RetryGovernor as one logical operation. Results come
back one vector per input text, in input order.
"""

import asyncio
from typing import Sequence

import structlog

from chromalink.embedding.config import EmbeddingConfig
from chromalink.embedding.provider import EmbeddingProvider
from chromalink.errors import ResponseFormatError
from chromalink.observability.metrics import MetricsCollector, get_metrics
from chromalink.retry.governor import RetryGovernor

logger = structlog.get_logger(__name__)


class EmbeddingPipeline:
    """
    Order-preserving, retried batch embedding.

    Features:
    - Empty input short-circuits without any provider call
    - Contiguous batches of at most ``max_batch_size`` texts
    - Each batch retried as a whole; a batch that exhausts its retries
      aborts the call and no partial result is returned
    - Dimension drift is logged, not rejected
    - Fixed pause after every provider call, independent of retry backoff

    Usage:
        pipeline = EmbeddingPipeline(provider, governor=RetryGovernor(policy))
        vectors = await pipeline.embed_many(["first text", "second text"])
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        config: EmbeddingConfig | None = None,
        governor: RetryGovernor | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self._provider = provider
        self._config = config or EmbeddingConfig()
        self._metrics = metrics or get_metrics()
        self._governor = governor or RetryGovernor(metrics=self._metrics)

    @property
    def dimension(self) -> int:
        """Declared embedding dimension."""
        return self._config.embedding_dim

    @property
    def model_name(self) -> str:
        return self._config.short_model_name

    async def embed_text(self, text: str) -> list[float]:
        """Embed a single text."""
        vectors = await self.embed_many([text])
        if not vectors:
            raise ResponseFormatError("No embedding returned")
        return vectors[0]

    async def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed texts, one vector per text in input order.

        Raises:
            RetryExhaustedError: If a batch kept failing with retryable errors
            ChromaLinkError: The first fatal error raised by the provider
        """
        if not texts:
            return []

        batch_size = self._config.max_batch_size
        logger.info(
            "Generating embeddings",
            texts=len(texts),
            batch_size=batch_size,
        )

        embeddings: list[list[float]] = []
        for start in range(0, len(texts), batch_size):
            batch = list(texts[start : start + batch_size])
            embeddings.extend(await self.embed_batch(batch))

        logger.info("Generated embeddings", count=len(embeddings))
        return embeddings

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed one batch as a single governed operation."""
        return await self._governor.execute(
            "embed_batch",
            lambda: self._call_provider(texts),
        )

    async def _call_provider(self, texts: list[str]) -> list[list[float]]:
        """Submit texts one at a time, pausing after each call."""
        expected = self._config.embedding_dim
        pause = self._config.request_pause_seconds
        vectors: list[list[float]] = []

        for text in texts:
            try:
                vector = await self._provider.embed_text(text)
            except Exception:
                self._metrics.record_embedding_request(success=False)
                raise
            finally:
                # Pace every call, including failed ones
                await asyncio.sleep(pause)

            self._metrics.record_embedding_request(success=True)
            if len(vector) != expected:
                self._metrics.record_dimension_mismatch()
                logger.warning(
                    "Unexpected embedding dimension",
                    dimension=len(vector),
                    expected=expected,
                )
            vectors.append(vector)

        return vectors
