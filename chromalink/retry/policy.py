"""
Retry policy and error classification.

Provides:
- RetryPolicy: retry budget with linear backoff (base_delay * attempt)
- ErrorClass: RETRYABLE / FATAL classification result
- classify_error: default classifier for transport and API failures
- to_transport_error: converts httpx exceptions into TransportError
"""

import enum
from dataclasses import dataclass

import httpx

from chromalink.config.settings import Settings
from chromalink.errors import ApiError, TransportError

RETRYABLE_STATUS_CODES = frozenset({500, 502, 503, 504})


class ErrorClass(str, enum.Enum):
    """Outcome of classifying a failed attempt."""

    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Linear backoff configuration for governed operations.

    Retry attempt k (1-indexed) waits base_delay * k seconds, so with
    base_delay=1.0 the schedule is 1s, 2s, 3s, ...

    Attributes:
        max_retries: Retries allowed after the initial attempt (0 = single attempt)
        base_delay: Backoff unit in seconds
    """

    max_retries: int = 3
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        """Validate policy values."""
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            base_delay=settings.retry_delay_seconds,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """
        Backoff before retry number `attempt`.

        Args:
            attempt: The retry attempt number (1-indexed)

        Returns:
            Delay in seconds
        """
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        return self.base_delay * attempt


def classify_error(exc: BaseException) -> ErrorClass:
    """
    Classify a failure as transient or fatal.

    Retryable:
    - TransportError raised for a timeout or connection failure
    - ApiError with status 500, 502, 503 or 504

    Everything else (4xx, malformed requests, decode errors, local
    invariant violations) is fatal.
    """
    if isinstance(exc, TransportError) and exc.retryable:
        return ErrorClass.RETRYABLE
    if isinstance(exc, ApiError) and exc.status_code in RETRYABLE_STATUS_CODES:
        return ErrorClass.RETRYABLE
    return ErrorClass.FATAL


def to_transport_error(exc: httpx.HTTPError, target: str) -> TransportError:
    """Wrap an httpx exception, flagging timeouts and connect failures as retryable."""
    retryable = isinstance(exc, (httpx.TimeoutException, httpx.ConnectError))
    return TransportError(
        f"{type(exc).__name__} calling {target}: {exc}",
        retryable=retryable,
    )
