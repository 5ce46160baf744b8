"""
Data models for the local vector store.

StoredDocument is the unit of storage; StoreFile is the on-disk schema
used to validate persisted stores; ScoredDocument is a ranked search hit.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class StoredDocument(BaseModel):
    """
    A document held by a LocalVectorStore.

    Instances are immutable; the embedding is a tuple of finite floats so a
    stored vector cannot change length or become unserializable after it
    passes the dimension check.

    Attributes:
        id: Opaque identifier, generated when not supplied
        content: Text payload
        embedding: Dense vector, length must equal the store dimension
        metadata: String key/value pairs
        created_at: Insertion timestamp (UTC)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    content: str
    embedding: tuple[FiniteFloat, ...]
    metadata: dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)

    def matches(self, where: dict[str, str] | None) -> bool:
        """Check that every key/value pair in ``where`` is present in metadata."""
        if not where:
            return True
        return all(self.metadata.get(key) == value for key, value in where.items())


class StoreFile(BaseModel):
    """On-disk representation of a LocalVectorStore."""

    documents: list[StoredDocument]
    dimension: int
    model: str


@dataclass(frozen=True)
class ScoredDocument:
    """
    Result from a similarity ranking.

    Attributes:
        score: Cosine similarity in [-1.0, 1.0]
        document: The matched document
    """

    score: float
    document: StoredDocument

    @property
    def document_id(self) -> str:
        return self.document.id
