"""
Command-line interface for chromalink.

Usage:
    chromalink health                          # Check ChromaDB heartbeat
    chromalink index notes.txt --store v.json  # Embed lines into a local store
    chromalink search "query" --store v.json   # Search the local store
"""

import asyncio
import sys
from pathlib import Path

import click
import structlog

from chromalink.config.settings import get_settings
from chromalink.errors import ChromaLinkError
from chromalink.observability.logging import setup_logging
from chromalink.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """chromalink - resilient ChromaDB and Gemini embedding client."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()
    structlog.contextvars.bind_contextvars(
        command=click.get_current_context().invoked_subcommand
    )


@main.command()
def health() -> None:
    """Check that ChromaDB is reachable."""
    from chromalink.gateway.client import ChromaGateway

    async def run() -> None:
        async with ChromaGateway() as chroma:
            await chroma.health_check()
            click.echo(f"ChromaDB is healthy at {chroma.base_url}")

    try:
        asyncio.run(run())
    except ChromaLinkError as e:
        click.echo(f"ChromaDB is not accessible: {e}", err=True)
        sys.exit(1)


def _build_manager(store_path: Path, provider):
    from chromalink.embedding.config import EmbeddingConfig
    from chromalink.embedding.service import EmbeddingPipeline
    from chromalink.retry.governor import RetryGovernor
    from chromalink.retry.policy import RetryPolicy
    from chromalink.vectorstore.manager import VectorStoreManager
    from chromalink.vectorstore.store import LocalVectorStore

    config = EmbeddingConfig()
    pipeline = EmbeddingPipeline(
        provider,
        config=config,
        governor=RetryGovernor(RetryPolicy.from_settings(get_settings())),
    )
    if store_path.exists():
        store = LocalVectorStore.load(store_path)
    else:
        store = LocalVectorStore.create(config.embedding_dim, config.short_model_name)
    return VectorStoreManager(store, pipeline)


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--store",
    "store_path",
    default="vectors.json",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Local vector store file",
)
@click.option("--category", default=None, help="Category metadata for every line")
@click.option("--metrics/--no-metrics", default=False, help="Expose Prometheus metrics while running")
def index(source: Path, store_path: Path, category: str | None, metrics: bool) -> None:
    """Embed every non-empty line of SOURCE into the local store."""
    from chromalink.embedding.provider import GeminiEmbeddingProvider
    from chromalink.vectorstore.manager import IngestItem

    lines = [line.strip() for line in source.read_text(encoding="utf-8").splitlines()]
    metadata = {"source": source.name}
    if category:
        metadata["category"] = category
    items = [IngestItem(content=line, metadata=dict(metadata)) for line in lines if line]

    if metrics:
        get_metrics().start_server()

    async def run() -> int:
        async with GeminiEmbeddingProvider() as provider:
            manager = _build_manager(store_path, provider)
            await manager.ingest(items)
            manager.store.save(store_path)
            return len(manager.store)

    try:
        total = asyncio.run(run())
    except ChromaLinkError as e:
        click.echo(f"Indexing failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Indexed {len(items)} documents ({total} total) into {store_path}")


@main.command()
@click.argument("query")
@click.option(
    "--store",
    "store_path",
    default="vectors.json",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Local vector store file",
)
@click.option("-k", "--top-k", default=3, show_default=True, help="Number of results")
@click.option("--metrics/--no-metrics", default=False, help="Expose Prometheus metrics while running")
def search(query: str, store_path: Path, top_k: int, metrics: bool) -> None:
    """Search the local store for documents similar to QUERY."""
    from chromalink.embedding.provider import GeminiEmbeddingProvider

    if metrics:
        get_metrics().start_server()

    async def run():
        async with GeminiEmbeddingProvider() as provider:
            manager = _build_manager(store_path, provider)
            return await manager.search_text(query, k=top_k)

    try:
        results = asyncio.run(run())
    except ChromaLinkError as e:
        click.echo(f"Search failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Query: {query}")
    for position, hit in enumerate(results, start=1):
        category = hit.document.metadata.get("category", "-")
        click.echo(
            f"  {position}. [similarity: {hit.score:.4f}] {hit.document.content} ({category})"
        )


if __name__ == "__main__":
    main()
