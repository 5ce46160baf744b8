"""
Retry governor for remote calls.

This module provides:
- RetryPolicy: retry budget with linear backoff
- ErrorClass / classify_error: transient vs fatal failure classification
- RetryGovernor: wraps a repeatable async action with retry and backoff
"""

from chromalink.retry.governor import RetryGovernor
from chromalink.retry.policy import (
    ErrorClass,
    RetryPolicy,
    classify_error,
    to_transport_error,
)

__all__ = [
    "ErrorClass",
    "RetryGovernor",
    "RetryPolicy",
    "classify_error",
    "to_transport_error",
]
