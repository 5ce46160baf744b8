"""Tests for the ChromaDB gateway."""

import json

import httpx
import pytest
import respx

from chromalink.errors import (
    ApiError,
    CollectionError,
    ConfigError,
    ResponseFormatError,
    RetryExhaustedError,
    TransportError,
)
from chromalink.gateway.client import ChromaGateway, validate_base_url


class TestValidateBaseUrl:
    """Tests for base URL validation."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("http://localhost:8000", "http://localhost:8000"),
            ("https://chroma.example.com/", "https://chroma.example.com"),
            ("  http://10.0.0.5:8000//  ", "http://10.0.0.5:8000"),
        ],
    )
    def test_valid_urls_normalized(self, url, expected):
        assert validate_base_url(url) == expected

    @pytest.mark.parametrize(
        "url", ["localhost:8000", "ftp://chroma.example.com", "http://", "not a url", ""]
    )
    def test_invalid_urls_raise_config_error(self, url):
        with pytest.raises(ConfigError):
            validate_base_url(url)

    def test_gateway_rejects_invalid_url(self, test_settings):
        with pytest.raises(ConfigError):
            ChromaGateway(test_settings, base_url="ftp://nope")


class TestHealthCheck:
    """Tests for health_check."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_healthy(self, gateway, api_base):
        respx.get(f"{api_base}/heartbeat").mock(
            return_value=httpx.Response(200, json={"nanosecond heartbeat": 1})
        )

        assert await gateway.health_check() is True

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_server_errors(self, gateway, api_base, mock_sleep):
        route = respx.get(f"{api_base}/heartbeat").mock(
            side_effect=[
                httpx.Response(503),
                httpx.ConnectError("refused"),
                httpx.Response(200, json={}),
            ]
        )

        assert await gateway.health_check() is True
        assert route.call_count == 3
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_exhausts_retries(self, gateway, api_base, mock_sleep):
        route = respx.get(f"{api_base}/heartbeat").mock(
            side_effect=httpx.ConnectTimeout("timed out")
        )

        with pytest.raises(RetryExhaustedError) as exc_info:
            await gateway.health_check()

        assert route.call_count == 4
        assert exc_info.value.attempts == 4
        assert isinstance(exc_info.value.last_error, TransportError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_client_error_not_retried(self, gateway, api_base, mock_sleep):
        route = respx.get(f"{api_base}/heartbeat").mock(
            return_value=httpx.Response(404, text="no such route")
        )

        with pytest.raises(ApiError) as exc_info:
            await gateway.health_check()

        assert exc_info.value.status_code == 404
        assert route.call_count == 1


class TestCollections:
    """Tests for collection lifecycle."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_create_collection(self, gateway, api_base):
        route = respx.post(f"{api_base}/collections").mock(
            return_value=httpx.Response(
                200,
                json={"name": "documents", "id": "c-1", "metadata": {"hnsw:space": "cosine"}},
            )
        )

        collection = await gateway.create_collection("documents")

        assert collection.name == "documents"
        assert collection.id == "c-1"
        assert json.loads(route.calls.last.request.content) == {
            "name": "documents",
            "metadata": {"hnsw:space": "cosine"},
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_create_collection_not_retried(self, gateway, api_base, mock_sleep):
        route = respx.post(f"{api_base}/collections").mock(
            return_value=httpx.Response(500, text="internal")
        )

        with pytest.raises(CollectionError) as exc_info:
            await gateway.create_collection("documents")

        assert exc_info.value.status_code == 500
        assert route.call_count == 1
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @respx.mock
    async def test_create_collection_transport_error_not_retried(self, gateway, api_base):
        route = respx.post(f"{api_base}/collections").mock(
            side_effect=httpx.ReadTimeout("slow")
        )

        with pytest.raises(TransportError):
            await gateway.create_collection("documents")

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_collection(self, gateway, api_base):
        respx.get(f"{api_base}/collections/documents").mock(
            return_value=httpx.Response(200, json={"name": "documents", "id": "c-1"})
        )

        collection = await gateway.get_collection("documents")

        assert collection.id == "c-1"
        assert collection.metadata is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_missing_collection(self, gateway, api_base):
        respx.get(f"{api_base}/collections/ghost").mock(return_value=httpx.Response(404))

        with pytest.raises(CollectionError):
            await gateway.get_collection("ghost")

    @pytest.mark.asyncio
    @respx.mock
    async def test_delete_collection_not_retried(self, gateway, api_base, mock_sleep):
        route = respx.delete(f"{api_base}/collections/documents").mock(
            return_value=httpx.Response(503)
        )

        with pytest.raises(CollectionError):
            await gateway.delete_collection("documents")

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_collection_name_is_escaped(self, gateway, api_base):
        route = respx.delete(url__startswith=f"{api_base}/collections/").mock(
            return_value=httpx.Response(200)
        )

        await gateway.delete_collection("my docs/v2")

        assert route.calls.last.request.url.raw_path == b"/api/v2/collections/my%20docs%2Fv2"


class TestDocuments:
    """Tests for document operations."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_add_documents_body(self, gateway, api_base, sample_documents):
        route = respx.post(f"{api_base}/collections/documents/add").mock(
            return_value=httpx.Response(201, json=True)
        )

        await gateway.add_documents(
            "documents", sample_documents, [[0.1, 0.2], [0.3, 0.4]]
        )

        assert json.loads(route.calls.last.request.content) == {
            "ids": ["rust-systems", "chromadb"],
            "embeddings": [[0.1, 0.2], [0.3, 0.4]],
            "metadatas": [{"category": "programming"}, {"category": "database"}],
            "documents": [
                "Rust is a systems programming language",
                "ChromaDB is a vector database for AI applications",
            ],
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_add_documents_misaligned(self, gateway, api_base, sample_documents):
        route = respx.post(f"{api_base}/collections/documents/add")

        with pytest.raises(ValueError, match="equal length"):
            await gateway.add_documents("documents", sample_documents, [[0.1, 0.2]])

        assert not route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_add_documents_not_retried(self, gateway, api_base, sample_documents, mock_sleep):
        route = respx.post(f"{api_base}/collections/documents/add").mock(
            return_value=httpx.Response(502)
        )

        with pytest.raises(ApiError):
            await gateway.add_documents("documents", sample_documents, [[0.1], [0.2]])

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_update_documents_retried(self, gateway, api_base, sample_documents, mock_sleep):
        route = respx.post(f"{api_base}/collections/documents/update").mock(
            side_effect=[httpx.Response(500), httpx.Response(200, json=True)]
        )

        await gateway.update_documents("documents", sample_documents, [[0.1], [0.2]])

        assert route.call_count == 2
        assert json.loads(route.calls.last.request.content)["ids"] == ["rust-systems", "chromadb"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_delete_documents(self, gateway, api_base):
        route = respx.post(f"{api_base}/collections/documents/delete").mock(
            return_value=httpx.Response(200, json=["a"])
        )

        await gateway.delete_documents("documents", ["a"])

        assert json.loads(route.calls.last.request.content) == {"ids": ["a"]}

    @pytest.mark.asyncio
    @respx.mock
    async def test_count(self, gateway, api_base):
        respx.get(f"{api_base}/collections/documents/count").mock(
            return_value=httpx.Response(200, json=6)
        )

        assert await gateway.count("documents") == 6

    @pytest.mark.asyncio
    @respx.mock
    async def test_count_bad_payload(self, gateway, api_base):
        respx.get(f"{api_base}/collections/documents/count").mock(
            return_value=httpx.Response(200, json={"count": 6})
        )

        with pytest.raises(ResponseFormatError):
            await gateway.count("documents")


class TestQuery:
    """Tests for query and get."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_query_without_filter(self, gateway, api_base, query_payload):
        route = respx.post(f"{api_base}/collections/documents/query").mock(
            return_value=httpx.Response(200, json=query_payload)
        )

        result = await gateway.query("documents", [[0.1, 0.2]], n_results=2)

        assert result.top_ids() == ["rust-systems", "chromadb"]
        assert result.distances == [[0.12, 0.48]]
        assert json.loads(route.calls.last.request.content) == {
            "query_embeddings": [[0.1, 0.2]],
            "n_results": 2,
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_query_with_filter(self, gateway, api_base, query_payload):
        route = respx.post(f"{api_base}/collections/documents/query").mock(
            return_value=httpx.Response(200, json=query_payload)
        )

        await gateway.query_with_filter(
            "documents", [[0.1, 0.2]], n_results=2, where={"category": "programming"}
        )

        body = json.loads(route.calls.last.request.content)
        assert body["where"] == {"category": "programming"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_query_retries_then_succeeds(self, gateway, api_base, query_payload, mock_sleep):
        route = respx.post(f"{api_base}/collections/documents/query").mock(
            side_effect=[
                httpx.ReadTimeout("slow"),
                httpx.Response(504),
                httpx.Response(200, json=query_payload),
            ]
        )

        result = await gateway.query("documents", [[0.1, 0.2]], n_results=2)

        assert route.call_count == 3
        assert len(result.ids) == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_query_malformed_response_not_retried(self, gateway, api_base, mock_sleep):
        route = respx.post(f"{api_base}/collections/documents/query").mock(
            return_value=httpx.Response(200, json={"unexpected": True})
        )

        with pytest.raises(ResponseFormatError):
            await gateway.query("documents", [[0.1]], n_results=1)

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_documents(self, gateway, api_base):
        route = respx.post(f"{api_base}/collections/documents/get").mock(
            return_value=httpx.Response(
                200,
                json={
                    "ids": ["chromadb"],
                    "documents": ["ChromaDB is a vector database for AI applications"],
                    "metadatas": [{"category": "database"}],
                },
            )
        )

        result = await gateway.get_documents(
            "documents", where={"category": "database"}, limit=10
        )

        assert result.ids == ["chromadb"]
        assert json.loads(route.calls.last.request.content) == {
            "where": {"category": "database"},
            "limit": 10,
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_documents_by_id_empty_body_fields(self, gateway, api_base):
        route = respx.post(f"{api_base}/collections/documents/get").mock(
            return_value=httpx.Response(200, json={"ids": []})
        )

        result = await gateway.get_documents("documents", ids=["missing"])

        assert result.ids == []
        assert json.loads(route.calls.last.request.content) == {"ids": ["missing"]}


class TestClientLifecycle:
    """Tests for client ownership."""

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self, test_settings, governor):
        client = httpx.AsyncClient()
        async with ChromaGateway(test_settings, governor=governor, client=client):
            pass

        assert not client.is_closed
        await client.aclose()

    def test_timeouts_from_settings(self, test_settings, governor):
        gateway = ChromaGateway(test_settings, governor=governor)

        assert gateway._client.timeout.connect == 1.0
        assert gateway._client.timeout.read == 2.0
