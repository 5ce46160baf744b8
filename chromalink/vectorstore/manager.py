"""
High-level manager for local vector store operations.

VectorStoreManager combines the EmbeddingPipeline and a LocalVectorStore
so application code can ingest and search by text.
"""

from dataclasses import dataclass, field
from typing import Sequence

import structlog

from chromalink.embedding.service import EmbeddingPipeline
from chromalink.vectorstore.models import ScoredDocument, StoredDocument
from chromalink.vectorstore.store import LocalVectorStore

logger = structlog.get_logger(__name__)


@dataclass
class IngestItem:
    """Text to embed and store, with optional id and metadata."""

    content: str
    metadata: dict[str, str] = field(default_factory=dict)
    id: str | None = None


class VectorStoreManager:
    """
    High-level orchestration for local vector operations.

    - Ingesting texts (embed + append to the store)
    - Querying by text (embed query + search)

    The manager inherits the store's single-writer precondition.
    """

    def __init__(self, store: LocalVectorStore, pipeline: EmbeddingPipeline):
        self._store = store
        self._pipeline = pipeline

    @property
    def store(self) -> LocalVectorStore:
        return self._store

    async def ingest(self, items: Sequence[IngestItem]) -> list[StoredDocument]:
        """
        Embed and store items.

        Embedding happens before any write, so a failed embedding call leaves
        the store untouched. Dimension mismatches from the provider surface
        here as DimensionMismatch when the store rejects the batch.

        Returns:
            The stored documents, in input order
        """
        if not items:
            return []

        embeddings = await self._pipeline.embed_many([item.content for item in items])

        documents = []
        for item, embedding in zip(items, embeddings):
            kwargs = {"id": item.id} if item.id is not None else {}
            documents.append(
                StoredDocument(
                    content=item.content,
                    embedding=embedding,
                    metadata=dict(item.metadata),
                    **kwargs,
                )
            )

        self._store.add_many(documents)
        logger.info("Ingested documents", count=len(documents), total=len(self._store))
        return documents

    async def search_text(
        self,
        query: str,
        k: int = 5,
        where: dict[str, str] | None = None,
    ) -> list[ScoredDocument]:
        """Embed ``query`` and return the k most similar stored documents."""
        embedding = await self._pipeline.embed_text(query)
        return self._store.search(embedding, k=k, where=where)
