"""Decide whether a failed request is worth another attempt.

A failure is retryable when its status code is one of
:data:`RETRY_STATUS_CODES` or its status text contains (case-insensitively)
one of :data:`RETRY_STATUS_TEXTS`.  Anything else, including a failure with
no status at all, is terminal.
"""

from __future__ import annotations

from smartfetch.exceptions import RetryableServerFailure, ServerFailure, TerminalServerFailure
from smartfetch.results import FailureDescriptor

RETRY_STATUS_CODES = frozenset({500, 502, 503, 504, 429})

RETRY_STATUS_TEXTS = (
    "Internal Server Error",  # 500
    "Bad Gateway",  # 502
    "Service Unavailable",  # 503
    "Gateway Timeout",  # 504
    "Too Many Requests",  # 429
)

_LOWERED_TEXTS = tuple(text.lower() for text in RETRY_STATUS_TEXTS)


def is_retryable(failure: FailureDescriptor) -> bool:
    """Return ``True`` if *failure* looks transient."""
    if failure.status_code in RETRY_STATUS_CODES:
        return True
    if not failure.status_text:
        return False
    text = failure.status_text.lower()
    return any(phrase in text for phrase in _LOWERED_TEXTS)


def classify(failure: FailureDescriptor) -> ServerFailure:
    """Wrap *failure* in the exception type matching its retryability."""
    if is_retryable(failure):
        return RetryableServerFailure(failure)
    return TerminalServerFailure(failure)
