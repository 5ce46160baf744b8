"""
Request and response models for the ChromaDB REST API.

Request models are serialized with ``exclude_none`` so optional fields
(``where``, ``limit``) are omitted rather than sent as null.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field, model_validator


class Document(BaseModel):
    """A document to be written to a remote collection."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content: str
    metadata: dict[str, str] = Field(default_factory=dict)


class CollectionResponse(BaseModel):
    """Collection descriptor returned by create/get."""

    name: str
    id: str
    metadata: dict[str, Any] | None = None


class AddRequest(BaseModel):
    """Body for add and update; all lists are positionally aligned."""

    ids: list[str]
    embeddings: list[list[float]]
    metadatas: list[dict[str, str]]
    documents: list[str]

    @model_validator(mode="after")
    def _check_aligned(self) -> "AddRequest":
        lengths = {
            len(self.ids),
            len(self.embeddings),
            len(self.metadatas),
            len(self.documents),
        }
        if len(lengths) != 1:
            raise ValueError(
                "ids, embeddings, metadatas and documents must have equal length"
            )
        return self

    @classmethod
    def from_documents(
        cls, documents: list[Document], embeddings: list[list[float]]
    ) -> "AddRequest":
        return cls(
            ids=[d.id for d in documents],
            embeddings=embeddings,
            metadatas=[d.metadata for d in documents],
            documents=[d.content for d in documents],
        )


class QueryRequest(BaseModel):
    query_embeddings: list[list[float]]
    n_results: int = Field(ge=1)
    where: dict[str, Any] | None = None


class GetRequest(BaseModel):
    ids: list[str] | None = None
    where: dict[str, Any] | None = None
    limit: int | None = Field(default=None, ge=1)


class QueryResponse(BaseModel):
    """
    Nearest-neighbor results; the outer index is one entry per query embedding.
    """

    ids: list[list[str]]
    documents: list[list[str | None]] | None = None
    metadatas: list[list[dict[str, Any] | None]] | None = None
    distances: list[list[float | None]] | None = None
    embeddings: list[list[list[float]]] | None = None

    def top_ids(self) -> list[str]:
        """Ids matched for the first query embedding."""
        return self.ids[0] if self.ids else []


class GetResponse(BaseModel):
    """Documents matched by id or metadata filter (flat lists)."""

    ids: list[str]
    documents: list[str | None] | None = None
    metadatas: list[dict[str, Any] | None] | None = None
    embeddings: list[list[float]] | None = None
