"""
Local, persistable vector store with brute-force cosine search.

LocalVectorStore keeps documents in insertion order, validates embedding
dimensions on every write and on load, and persists the whole store as a
single JSON file replaced atomically on save.

Concurrency: the store is not internally synchronized. A single writer per
instance is assumed; concurrent searches are fine, but not alongside
add/save/load on the same instance.
"""

import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, Sequence

import structlog
from pydantic import ValidationError

from chromalink.errors import ConfigError, DimensionMismatch, PersistenceError
from chromalink.vectorstore.models import ScoredDocument, StoredDocument, StoreFile
from chromalink.vectorstore.similarity import rank

logger = structlog.get_logger(__name__)

DEFAULT_MODEL_NAME = "gemini-embedding-exp-03-07"


def _detached(document: StoredDocument) -> StoredDocument:
    # Callers keep their metadata dict; the store holds its own.
    return document.model_copy(update={"metadata": dict(document.metadata)})


class LocalVectorStore:
    """
    In-memory document collection with exact nearest-neighbor search.

    Usage:
        store = LocalVectorStore.create(dimension=3072, model_name="gemini-embedding-exp-03-07")
        store.add(StoredDocument(content="...", embedding=vector))
        hits = store.search(query_vector, k=5)
        store.save("vectors.json")
        restored = LocalVectorStore.load("vectors.json")
    """

    def __init__(
        self,
        dimension: int,
        model_name: str = DEFAULT_MODEL_NAME,
        documents: Iterable[StoredDocument] | None = None,
    ):
        if isinstance(dimension, bool) or not isinstance(dimension, int) or dimension <= 0:
            raise ConfigError(f"dimension must be a positive integer, got {dimension!r}")

        self._dimension = dimension
        self._model_name = model_name
        self._documents: list[StoredDocument] = []

        if documents is not None:
            self.add_many(documents)

    @classmethod
    def create(cls, dimension: int, model_name: str = DEFAULT_MODEL_NAME) -> "LocalVectorStore":
        """Create an empty store with a fixed dimension."""
        return cls(dimension=dimension, model_name=model_name)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def documents(self) -> tuple[StoredDocument, ...]:
        """Snapshot of stored documents in insertion order."""
        return tuple(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[StoredDocument]:
        return iter(self._documents)

    def _check_dimension(self, embedding: Sequence[float], context: str) -> None:
        if len(embedding) != self._dimension:
            raise DimensionMismatch(self._dimension, len(embedding), context=context)

    def add(self, document: StoredDocument) -> None:
        """
        Append a document.

        Duplicate ids are not rejected.

        Raises:
            DimensionMismatch: If the embedding length differs from the store dimension
        """
        self._check_dimension(document.embedding, f"document {document.id!r}")
        self._documents.append(_detached(document))

    def add_many(self, documents: Iterable[StoredDocument]) -> int:
        """
        Append several documents, all or nothing.

        Returns:
            Number of documents added

        Raises:
            DimensionMismatch: If any embedding has the wrong length (nothing is added)
        """
        batch = list(documents)
        for doc in batch:
            self._check_dimension(doc.embedding, f"document {doc.id!r}")
        self._documents.extend(_detached(doc) for doc in batch)
        return len(batch)

    def search(
        self,
        query_embedding: Sequence[float],
        k: int = 5,
        where: dict[str, str] | None = None,
    ) -> list[ScoredDocument]:
        """
        Find the k most similar documents.

        Args:
            query_embedding: Query vector (must match the store dimension)
            k: Maximum number of results
            where: Optional exact-match metadata filter applied before ranking

        Returns:
            Results sorted by cosine similarity, highest first

        Raises:
            DimensionMismatch: If the query length differs from the store dimension
        """
        self._check_dimension(query_embedding, "query embedding")
        candidates = self._documents
        if where:
            candidates = [doc for doc in self._documents if doc.matches(where)]
        return rank(query_embedding, candidates, k)

    def to_file_model(self) -> StoreFile:
        return StoreFile(
            documents=list(self._documents),
            dimension=self._dimension,
            model=self._model_name,
        )

    def save(self, destination: str | os.PathLike[str]) -> None:
        """
        Write the whole store to ``destination`` as JSON.

        The file is written to a temp file in the same directory and then
        renamed over the destination, so readers see either the previous
        file or the complete new one.

        Raises:
            PersistenceError: On any I/O failure
        """
        path = Path(destination)
        payload = self.to_file_model().model_dump_json(indent=2)

        tmp_path: str | None = None
        try:
            directory = path.parent
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise PersistenceError(f"Failed to save vector store to {path}: {e}") from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

        logger.info(
            "Saved vector store",
            path=str(path),
            documents=len(self._documents),
            dimension=self._dimension,
        )

    @classmethod
    def load(cls, source: str | os.PathLike[str]) -> "LocalVectorStore":
        """
        Reconstruct a store saved with ``save``.

        Every document is revalidated against the declared dimension, since
        the file may have been edited by hand or written by another version.

        Raises:
            PersistenceError: If the file is missing, unreadable, or does not match the schema
            DimensionMismatch: If a stored embedding disagrees with the declared dimension
        """
        path = Path(source)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read vector store from {path}: {e}") from e

        try:
            data = StoreFile.model_validate_json(raw)
        except ValidationError as e:
            raise PersistenceError(f"Invalid vector store file {path}: {e}") from e

        try:
            store = cls(dimension=data.dimension, model_name=data.model)
        except ConfigError as e:
            raise PersistenceError(f"Invalid vector store file {path}: {e}") from e
        store.add_many(data.documents)

        logger.info(
            "Loaded vector store",
            path=str(path),
            documents=len(store),
            dimension=store.dimension,
        )
        return store
