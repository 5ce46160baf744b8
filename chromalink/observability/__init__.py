"""Observability layer - logging and metrics."""

from chromalink.observability.logging import setup_logging
from chromalink.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
