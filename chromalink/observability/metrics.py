"""
Prometheus metrics for the vector-store client.

Defines and exposes metrics for:
- Retry attempts and exhausted operations
- Embedding provider calls and dimension drift
- Database gateway request outcomes

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    start_http_server,
)

from chromalink.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


class MetricsCollector:
    """
    Prometheus metrics collector for chromalink.

    Each collector owns its own registry so tests can create fresh
    instances without duplicate-registration errors.

    Usage:
        metrics = get_metrics()
        metrics.start_server()
        metrics.record_retry("query")
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()

        # Retry governor
        self.retries = Counter(
            "chromalink_retries_total",
            "Total retry attempts scheduled after a retryable failure",
            ["operation"],
            registry=self.registry,
        )
        self.retries_exhausted = Counter(
            "chromalink_retries_exhausted_total",
            "Operations that failed after using every retry attempt",
            ["operation"],
            registry=self.registry,
        )
        self.operation_latency = Histogram(
            "chromalink_operation_latency_seconds",
            "Wall time of governed operations including backoff",
            ["operation", "status"],
            buckets=LATENCY_BUCKETS,
            registry=self.registry,
        )

        # Embedding provider
        self.embedding_requests = Counter(
            "chromalink_embedding_requests_total",
            "Individual embedding provider calls",
            ["status"],  # success, error
            registry=self.registry,
        )
        self.embedding_dimension_mismatches = Counter(
            "chromalink_embedding_dimension_mismatch_total",
            "Embeddings returned with an unexpected dimension",
            registry=self.registry,
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to listen on (defaults to settings.metrics_port)
        """
        port = port or get_settings().metrics_port
        start_http_server(port, registry=self.registry)
        logger.info(f"Metrics server started on port {port}")

    def record_retry(self, operation: str) -> None:
        self.retries.labels(operation=operation).inc()

    def record_exhausted(self, operation: str) -> None:
        self.retries_exhausted.labels(operation=operation).inc()

    def record_operation(self, operation: str, status: str, latency: float) -> None:
        """Record the outcome and duration of a governed operation."""
        self.operation_latency.labels(operation=operation, status=status).observe(
            latency
        )

    def record_embedding_request(self, success: bool) -> None:
        status = "success" if success else "error"
        self.embedding_requests.labels(status=status).inc()

    def record_dimension_mismatch(self) -> None:
        self.embedding_dimension_mismatches.inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
