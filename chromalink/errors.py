"""
Error taxonomy for the vector-store client.

Only TransportError (timeouts, connection failures) and 5xx ApiError are
eligible for retry; everything else is fatal and propagates on first
occurrence. RetryExhaustedError wraps the terminal cause once the retry
budget is spent.
"""


class ChromaLinkError(Exception):
    """Base exception for all chromalink errors."""


class ConfigError(ChromaLinkError):
    """Invalid construction parameters (base URL, dimension)."""


class TransportError(ChromaLinkError):
    """
    Network-level failure talking to a remote service.

    Attributes:
        retryable: True for timeouts and connection-establishment failures
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class ApiError(ChromaLinkError):
    """Non-2xx response from a remote service."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class CollectionError(ApiError):
    """Collection lifecycle request (create, get, delete) was rejected."""


class ResponseFormatError(ChromaLinkError):
    """A response body could not be decoded into the expected shape."""


class DimensionMismatch(ChromaLinkError):
    """An embedding length disagrees with the declared dimension."""

    def __init__(self, expected: int, actual: int, context: str = "embedding"):
        super().__init__(
            f"{context} has dimension {actual}, expected {expected}"
        )
        self.expected = expected
        self.actual = actual


class PersistenceError(ChromaLinkError):
    """Saving or loading a local vector store failed."""


class RetryExhaustedError(ChromaLinkError):
    """
    A retryable operation kept failing until the retry budget ran out.

    Attributes:
        operation: Name of the governed operation
        attempts: Total number of attempts made (initial + retries)
        last_error: The error raised by the final attempt
    """

    def __init__(self, operation: str, attempts: int, last_error: Exception):
        super().__init__(
            f"{operation} failed after {attempts} attempts: {last_error}"
        )
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
