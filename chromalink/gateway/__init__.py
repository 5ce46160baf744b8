"""
ChromaDB database gateway.

This module provides:
- ChromaGateway: Async REST client for collection and document endpoints
- Document: Document payload for add/update
- QueryResponse / GetResponse / CollectionResponse: Decoded responses
"""

from chromalink.gateway.client import ChromaGateway, validate_base_url
from chromalink.gateway.models import (
    AddRequest,
    CollectionResponse,
    Document,
    GetResponse,
    QueryRequest,
    QueryResponse,
)

__all__ = [
    "AddRequest",
    "ChromaGateway",
    "CollectionResponse",
    "Document",
    "GetResponse",
    "QueryRequest",
    "QueryResponse",
    "validate_base_url",
]
