"""
ChromaDB REST gateway.

Builds requests against the collection and document endpoints. Read-like
calls (heartbeat, get collection, query, get, update, count) go through the
RetryGovernor; collection create/delete and document add/delete are issued
once, since repeating a non-idempotent write after an ambiguous failure is
riskier than surfacing the error.
"""

from typing import Any, TypeVar
from urllib.parse import quote, urlsplit

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from chromalink.config.settings import Settings, get_settings
from chromalink.errors import ApiError, CollectionError, ConfigError, ResponseFormatError
from chromalink.gateway.models import (
    AddRequest,
    CollectionResponse,
    Document,
    GetRequest,
    GetResponse,
    QueryRequest,
    QueryResponse,
)
from chromalink.retry.governor import RetryGovernor
from chromalink.retry.policy import RetryPolicy, to_transport_error

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_COLLECTION_METADATA = {"hnsw:space": "cosine"}


def validate_base_url(url: str) -> str:
    """
    Validate and normalize the database base URL.

    Returns:
        The URL without trailing slashes

    Raises:
        ConfigError: If the URL is not an http(s) URL with a host
    """
    try:
        parsed = urlsplit(url.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid URL {url!r}: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise ConfigError(f"URL must use HTTP or HTTPS, got {url!r}")
    if not parsed.netloc:
        raise ConfigError(f"URL has no host: {url!r}")
    return url.strip().rstrip("/")


class ChromaGateway:
    """
    Async client for the ChromaDB collection/document API.

    Usage:
        async with ChromaGateway(settings) as chroma:
            await chroma.health_check()
            await chroma.create_collection("documents")
            await chroma.add_documents("documents", docs, embeddings)
            result = await chroma.query("documents", [query_vector], n_results=3)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        base_url: str | None = None,
        policy: RetryPolicy | None = None,
        governor: RetryGovernor | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            settings: Application settings (cached settings if None)
            base_url: Overrides settings.chroma_host
            policy: Retry policy (derived from settings if None)
            governor: Preconfigured governor (built from policy if None)
            client: Preconfigured httpx client (created if None)

        Raises:
            ConfigError: If the base URL is invalid
        """
        settings = settings or get_settings()
        self._base_url = validate_base_url(base_url or settings.chroma_host)
        prefix = settings.chroma_api_prefix.strip("/")
        self._api_prefix = f"/{prefix}" if prefix else ""
        self._governor = governor or RetryGovernor(policy or RetryPolicy.from_settings(settings))

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                settings.request_timeout_seconds,
                connect=settings.connection_timeout_seconds,
            ),
            limits=httpx.Limits(
                max_keepalive_connections=10,
                keepalive_expiry=90.0,
            ),
        )

        logger.info("ChromaGateway initialized", base_url=self._base_url)

    async def __aenter__(self) -> "ChromaGateway":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, *parts: str) -> str:
        path = "/".join(quote(p, safe="") for p in parts)
        return f"{self._base_url}{self._api_prefix}/{path}"

    async def _send(
        self,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue one request, translating httpx failures into TransportError."""
        try:
            return await self._client.request(method, url, json=json_body)
        except httpx.HTTPError as e:
            raise to_transport_error(e, f"{method} {url}") from e

    @staticmethod
    def _raise_for_status(
        response: httpx.Response,
        action: str,
        error_cls: type[ApiError] = ApiError,
    ) -> None:
        if response.is_success:
            return
        raise error_cls(
            f"{action} failed with status {response.status_code}: {response.text}",
            status_code=response.status_code,
            response_body=response.text,
        )

    @staticmethod
    def _decode(response: httpx.Response, model: type[ModelT], action: str) -> ModelT:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise ResponseFormatError(f"Unexpected {action} response: {e}") from e

    # Health

    async def health_check(self) -> bool:
        """Check the heartbeat endpoint, retrying transient failures."""

        async def attempt() -> bool:
            response = await self._send("GET", self._url("heartbeat"))
            self._raise_for_status(response, "Health check")
            logger.debug("ChromaDB health check passed")
            return True

        return await self._governor.execute("health_check", attempt)

    # Collections

    async def create_collection(
        self,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> CollectionResponse:
        """Create a collection. Not retried."""
        body = {
            "name": name,
            "metadata": metadata if metadata is not None else DEFAULT_COLLECTION_METADATA,
        }
        response = await self._send("POST", self._url("collections"), body)
        self._raise_for_status(response, f"Create collection {name!r}", CollectionError)
        logger.info("Created collection", collection=name)
        return self._decode(response, CollectionResponse, "create collection")

    async def get_collection(self, name: str) -> CollectionResponse:
        """Fetch a collection descriptor."""

        async def attempt() -> CollectionResponse:
            response = await self._send("GET", self._url("collections", name))
            self._raise_for_status(response, f"Get collection {name!r}", CollectionError)
            return self._decode(response, CollectionResponse, "get collection")

        return await self._governor.execute("get_collection", attempt)

    async def delete_collection(self, name: str) -> None:
        """Delete a collection. Not retried."""
        response = await self._send("DELETE", self._url("collections", name))
        self._raise_for_status(response, f"Delete collection {name!r}", CollectionError)
        logger.info("Deleted collection", collection=name)

    # Documents

    async def add_documents(
        self,
        collection_name: str,
        documents: list[Document],
        embeddings: list[list[float]],
    ) -> None:
        """
        Add documents with their embeddings. Not retried.

        Raises:
            ValueError: If documents and embeddings are not the same length
        """
        request = AddRequest.from_documents(documents, embeddings)
        response = await self._send(
            "POST",
            self._url("collections", collection_name, "add"),
            request.model_dump(),
        )
        self._raise_for_status(response, "Add documents")
        logger.info("Added documents", collection=collection_name, count=len(documents))

    async def update_documents(
        self,
        collection_name: str,
        documents: list[Document],
        embeddings: list[list[float]],
    ) -> None:
        """Overwrite existing documents by id."""
        body = AddRequest.from_documents(documents, embeddings).model_dump()

        async def attempt() -> None:
            response = await self._send(
                "POST", self._url("collections", collection_name, "update"), body
            )
            self._raise_for_status(response, "Update documents")

        await self._governor.execute("update_documents", attempt)
        logger.info("Updated documents", collection=collection_name, count=len(documents))

    async def delete_documents(self, collection_name: str, ids: list[str]) -> None:
        """Delete documents by id. Not retried."""
        response = await self._send(
            "POST",
            self._url("collections", collection_name, "delete"),
            {"ids": ids},
        )
        self._raise_for_status(response, "Delete documents")
        logger.info("Deleted documents", collection=collection_name, count=len(ids))

    async def query(
        self,
        collection_name: str,
        query_embeddings: list[list[float]],
        n_results: int,
    ) -> QueryResponse:
        """Nearest-neighbor query without a metadata filter."""
        return await self.query_with_filter(collection_name, query_embeddings, n_results)

    async def query_with_filter(
        self,
        collection_name: str,
        query_embeddings: list[list[float]],
        n_results: int,
        where: dict[str, Any] | None = None,
    ) -> QueryResponse:
        """Nearest-neighbor query, optionally filtered by metadata predicates."""
        body = QueryRequest(
            query_embeddings=query_embeddings,
            n_results=n_results,
            where=where,
        ).model_dump(exclude_none=True)

        async def attempt() -> QueryResponse:
            response = await self._send(
                "POST", self._url("collections", collection_name, "query"), body
            )
            self._raise_for_status(response, "Query")
            result = self._decode(response, QueryResponse, "query")
            logger.debug("Query returned results", count=len(result.top_ids()))
            return result

        return await self._governor.execute("query", attempt)

    async def get_documents(
        self,
        collection_name: str,
        ids: list[str] | None = None,
        where: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> GetResponse:
        """Fetch documents by id and/or metadata filter."""
        body = GetRequest(ids=ids, where=where, limit=limit).model_dump(exclude_none=True)

        async def attempt() -> GetResponse:
            response = await self._send(
                "POST", self._url("collections", collection_name, "get"), body
            )
            self._raise_for_status(response, "Get documents")
            return self._decode(response, GetResponse, "get documents")

        return await self._governor.execute("get_documents", attempt)

    async def count(self, collection_name: str) -> int:
        """Number of documents in a collection."""

        async def attempt() -> int:
            response = await self._send(
                "GET", self._url("collections", collection_name, "count")
            )
            self._raise_for_status(response, "Count")
            try:
                value = response.json()
            except ValueError as e:
                raise ResponseFormatError(f"Unexpected count response: {e}") from e
            if isinstance(value, bool) or not isinstance(value, int):
                raise ResponseFormatError(f"Unexpected count response: {value!r}")
            return value

        return await self._governor.execute("count", attempt)
