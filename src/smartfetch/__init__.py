"""smartfetch -- cached HTTP GET with retry and backoff.

Given a URL, smartfetch performs an HTTP GET, retries on transient server
failures (exponential backoff with jitter, or the server's ``Retry-After``
delay), and memoizes the decoded body in a caller-supplied key-value store
so repeated calls for the same URL skip the network entirely.

Typical usage::

    from smartfetch import MemoryStore, Ok, smartfetch

    store = MemoryStore()
    result = smartfetch("https://api.example.com/data", store=store)
    if isinstance(result, Ok):
        print(result.body)

Modules:
    client: :class:`SmartFetcher`, :class:`AsyncSmartFetcher` and the one-shot helpers.
    cache: Store implementations and the cache gateway.
    retry: Error classification, backoff, and the retry loops.
    models: Pydantic :class:`FetchOptions`.
    results: :class:`Ok`, :class:`ServerError`, :class:`FailureDescriptor`.
    exceptions: Exception hierarchy rooted at :class:`SmartfetchError`.
    config: Cache directory resolution and option files.
"""

from smartfetch.cache import DiskStore, MemoryStore, Store
from smartfetch.client import AsyncSmartFetcher, SmartFetcher, async_smartfetch, smartfetch
from smartfetch.exceptions import (
    DecodeError,
    InvalidRetryAfterFormat,
    RetryAfterTooLong,
    RetryLimitExceeded,
    SmartfetchError,
    TerminalServerFailure,
)
from smartfetch.models import FetchOptions, ResponseFormat
from smartfetch.results import FailureDescriptor, FetchResult, Ok, ServerError

__version__ = "0.1.0"

__all__ = [
    "AsyncSmartFetcher",
    "DecodeError",
    "DiskStore",
    "FailureDescriptor",
    "FetchOptions",
    "FetchResult",
    "InvalidRetryAfterFormat",
    "MemoryStore",
    "Ok",
    "ResponseFormat",
    "RetryAfterTooLong",
    "RetryLimitExceeded",
    "ServerError",
    "SmartFetcher",
    "SmartfetchError",
    "Store",
    "TerminalServerFailure",
    "async_smartfetch",
    "smartfetch",
]
