"""Pytest fixtures for embedding tests."""

import pytest

from chromalink.embedding.config import EmbeddingConfig


class FakeProvider:
    """Provider recording every text it is asked to embed.

    Each vector encodes the text length so order can be checked.
    Errors queued in ``failures`` are raised (in order) before real results.
    """

    def __init__(self, dimension: int = 4, failures: list[Exception] | None = None):
        self.dimension = dimension
        self.calls: list[str] = []
        self.failures = list(failures or [])

    async def embed_text(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.failures:
            raise self.failures.pop(0)
        return [float(len(text))] + [0.0] * (self.dimension - 1)


@pytest.fixture
def embedding_config() -> EmbeddingConfig:
    """Small dimension and batch size for tests."""
    return EmbeddingConfig(
        _env_file=None,
        embedding_dim=4,
        max_batch_size=3,
        request_pause_ms=100,
    )


@pytest.fixture
def make_provider():
    """Factory for fake providers with custom dimension or queued failures."""
    return FakeProvider


@pytest.fixture
def fake_provider(make_provider) -> FakeProvider:
    return make_provider(dimension=4)
