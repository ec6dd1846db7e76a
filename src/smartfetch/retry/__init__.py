"""Retry machinery: error classification, backoff, and the retry loops.

Modules:
    classifier: :func:`is_retryable` / :func:`classify` for failed requests.
    backoff: :class:`BackoffStrategy` and :func:`resolve_retry_after`.
    controller: :class:`RetryController` and :class:`AsyncRetryController`.
"""

from smartfetch.retry.backoff import BackoffStrategy, resolve_retry_after
from smartfetch.retry.classifier import (
    RETRY_STATUS_CODES,
    RETRY_STATUS_TEXTS,
    classify,
    is_retryable,
)
from smartfetch.retry.controller import AsyncRetryController, RetryController

__all__ = [
    "AsyncRetryController",
    "BackoffStrategy",
    "RETRY_STATUS_CODES",
    "RETRY_STATUS_TEXTS",
    "RetryController",
    "classify",
    "is_retryable",
    "resolve_retry_after",
]
