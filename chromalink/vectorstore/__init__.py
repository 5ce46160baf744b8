"""
Local vector store for exact semantic search.

Main components:
- LocalVectorStore: Append-only document collection with JSON persistence
- StoredDocument: Document with content, embedding and metadata
- ScoredDocument: Ranked search hit
- rank / cosine_similarity: Brute-force similarity engine
- VectorStoreManager: High-level orchestration (embed + store + search)
"""

from chromalink.vectorstore.manager import IngestItem, VectorStoreManager
from chromalink.vectorstore.models import ScoredDocument, StoredDocument
from chromalink.vectorstore.similarity import cosine_similarity, rank
from chromalink.vectorstore.store import LocalVectorStore

__all__ = [
    "IngestItem",
    "LocalVectorStore",
    "ScoredDocument",
    "StoredDocument",
    "VectorStoreManager",
    "cosine_similarity",
    "rank",
]
