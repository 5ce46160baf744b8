"""Pytest fixtures for gateway tests."""

import pytest

from chromalink.gateway.client import ChromaGateway
from chromalink.gateway.models import Document

BASE = "http://chroma.test:8000/api/v2"


@pytest.fixture
def api_base() -> str:
    return BASE


@pytest.fixture
async def gateway(test_settings, governor):
    """Gateway against the test host, with a 3-retry governor."""
    async with ChromaGateway(test_settings, governor=governor) as chroma:
        yield chroma


@pytest.fixture
def sample_documents() -> list[Document]:
    return [
        Document(
            id="rust-systems",
            content="Rust is a systems programming language",
            metadata={"category": "programming"},
        ),
        Document(
            id="chromadb",
            content="ChromaDB is a vector database for AI applications",
            metadata={"category": "database"},
        ),
    ]


@pytest.fixture
def query_payload() -> dict:
    """Query response for a single query embedding."""
    return {
        "ids": [["rust-systems", "chromadb"]],
        "documents": [[
            "Rust is a systems programming language",
            "ChromaDB is a vector database for AI applications",
        ]],
        "metadatas": [[{"category": "programming"}, {"category": "database"}]],
        "distances": [[0.12, 0.48]],
        "embeddings": None,
    }
