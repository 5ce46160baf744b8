"""
Embedding generation module.

This module provides:
- EmbeddingConfig: Configuration settings for the provider and pipeline
- EmbeddingProvider: Protocol for single-text embedding backends
- GeminiEmbeddingProvider: httpx client for the Gemini embedContent API
- EmbeddingPipeline: Batched, retried, order-preserving embedding
"""

from chromalink.embedding.config import EmbeddingConfig
from chromalink.embedding.provider import EmbeddingProvider, GeminiEmbeddingProvider
from chromalink.embedding.service import EmbeddingPipeline

__all__ = [
    "EmbeddingConfig",
    "EmbeddingPipeline",
    "EmbeddingProvider",
    "GeminiEmbeddingProvider",
]
