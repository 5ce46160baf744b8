"""Pytest fixtures for chromalink tests."""

from unittest.mock import AsyncMock, patch

import pytest

from chromalink.config.settings import Settings
from chromalink.observability.metrics import MetricsCollector
from chromalink.retry.governor import RetryGovernor
from chromalink.retry.policy import RetryPolicy


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(
        _env_file=None,
        environment="development",
        log_level="DEBUG",
        chroma_host="http://chroma.test:8000",
        google_api_key="test-api-key",
        connection_timeout_ms=1_000,
        request_timeout_ms=2_000,
        max_retries=3,
        retry_delay_ms=10,
    )


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh metrics collector with its own registry."""
    return MetricsCollector()


@pytest.fixture
def mock_sleep():
    """Patch asyncio.sleep so backoff and pacing return immediately."""
    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.fixture
def governor(metrics) -> RetryGovernor:
    """Governor with three retries and a 1s backoff unit."""
    return RetryGovernor(RetryPolicy(max_retries=3, base_delay=1.0), metrics=metrics)
