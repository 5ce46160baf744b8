"""Retry governor for wrapping any repeatable async operation.

Usage:
    governor = RetryGovernor(RetryPolicy(max_retries=3, base_delay=1.0))
    response = await governor.execute("query", lambda: client.post(...))

The action is a zero-argument callable returning a fresh awaitable on every
call. It is invoked once per attempt, so it must be safe to run more than
once (at-least-once semantics). The governor cannot verify this; callers
only hand it idempotent work.
"""

import asyncio
import time
from typing import Awaitable, Callable, TypeVar

import structlog

from chromalink.errors import RetryExhaustedError
from chromalink.observability.metrics import MetricsCollector, get_metrics
from chromalink.retry.policy import ErrorClass, RetryPolicy, classify_error

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Classifier = Callable[[BaseException], ErrorClass]


class RetryGovernor:
    """Classification-based retry with linear backoff.

    - Success returns immediately.
    - FATAL failures propagate unchanged on first occurrence.
    - RETRYABLE failures are retried up to ``policy.max_retries`` times,
      sleeping ``policy.delay_for(attempt)`` between attempts.
    - When the budget is spent, RetryExhaustedError is raised, chained
      from the last error.

    Backoff uses ``asyncio.sleep``, so only the calling task is suspended.

    Args:
        policy: Retry budget and backoff unit.
        classify: Default error classifier.
        metrics: Metrics collector (global collector if None).
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        classify: Classifier = classify_error,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._policy = policy or RetryPolicy()
        self._classify = classify
        self._metrics = metrics or get_metrics()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        operation_name: str,
        action: Callable[[], Awaitable[T]],
        classify: Classifier | None = None,
    ) -> T:
        """Run ``action`` until it succeeds, fails fatally, or retries run out.

        Args:
            operation_name: Name used in logs, metrics and errors.
            action: Zero-argument callable producing a new awaitable per attempt.
            classify: Classifier overriding the governor default for this call.

        Returns:
            The value produced by the first successful attempt.

        Raises:
            RetryExhaustedError: If every attempt failed with a retryable error.
            Exception: The original error if it was classified FATAL.
        """
        with structlog.contextvars.bound_contextvars(operation=operation_name):
            return await self._run(operation_name, action, classify or self._classify)

    async def _run(
        self,
        operation_name: str,
        action: Callable[[], Awaitable[T]],
        classify: Classifier,
    ) -> T:
        max_attempts = self._policy.max_attempts
        started = time.monotonic()
        attempt = 0

        while True:
            attempt += 1
            try:
                result = await action()
            except Exception as exc:
                if classify(exc) is ErrorClass.FATAL:
                    self._metrics.record_operation(
                        operation_name, "fatal", time.monotonic() - started
                    )
                    raise

                if attempt > self._policy.max_retries:
                    logger.error(
                        "Operation failed after all retries",
                        attempts=attempt,
                        error=str(exc),
                    )
                    self._metrics.record_exhausted(operation_name)
                    self._metrics.record_operation(
                        operation_name, "exhausted", time.monotonic() - started
                    )
                    raise RetryExhaustedError(operation_name, attempt, exc) from exc

                delay = self._policy.delay_for(attempt)
                logger.warning(
                    "Operation failed, retrying",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    delay_seconds=delay,
                    error=str(exc),
                )
                self._metrics.record_retry(operation_name)
                await asyncio.sleep(delay)
                continue

            if attempt > 1:
                logger.info(
                    "Operation succeeded after retries",
                    retries=attempt - 1,
                )
            self._metrics.record_operation(
                operation_name, "success", time.monotonic() - started
            )
            return result
