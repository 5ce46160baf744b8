"""Pytest fixtures for vectorstore tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from chromalink.vectorstore.models import StoredDocument
from chromalink.vectorstore.store import LocalVectorStore


@pytest.fixture
def axis_documents() -> list[StoredDocument]:
    """Three orthogonal unit vectors a, b, c."""
    return [
        StoredDocument(id="a", content="alpha", embedding=[1.0, 0.0, 0.0], metadata={"kind": "x"}),
        StoredDocument(id="b", content="beta", embedding=[0.0, 1.0, 0.0], metadata={"kind": "y"}),
        StoredDocument(id="c", content="gamma", embedding=[0.0, 0.0, 1.0], metadata={"kind": "y"}),
    ]


@pytest.fixture
def axis_store(axis_documents) -> LocalVectorStore:
    """Dimension-3 store holding the axis documents."""
    store = LocalVectorStore.create(dimension=3, model_name="test-model")
    for doc in axis_documents:
        store.add(doc)
    return store


@pytest.fixture
def mock_pipeline() -> MagicMock:
    """Embedding pipeline returning fixed 3-d vectors."""
    pipeline = MagicMock()
    pipeline.embed_many = AsyncMock(
        side_effect=lambda texts: [[float(i + 1), 0.0, 1.0] for i in range(len(texts))]
    )
    pipeline.embed_text = AsyncMock(return_value=[1.0, 0.0, 0.0])
    return pipeline
