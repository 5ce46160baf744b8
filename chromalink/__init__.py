"""
Resilient ChromaDB client with Gemini embeddings and a local vector index.

Main components:
- RetryGovernor: classification-based retry with linear backoff
- EmbeddingPipeline: batched, order-preserving embedding generation
- ChromaGateway: ChromaDB REST collection/document operations
- LocalVectorStore: persistable brute-force cosine similarity index
"""

__version__ = "0.1.0"
