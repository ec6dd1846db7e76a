"""Cached, retrying GET fetchers built on :mod:`httpx`.

:class:`SmartFetcher` wires the pieces together:

- **Cache gateway** -- the store is consulted before any network
  activity; a hit short-circuits everything else.
- **Retry controller** -- the GET is retried on transient failures with
  exponential backoff or the server's ``Retry-After`` delay.
- **Decoding** -- a 2xx body is decoded according to
  :attr:`~smartfetch.models.FetchOptions.format` and committed to the
  store.
- **Error mapping** -- non-retryable HTTP failures come back as
  :class:`~smartfetch.results.ServerError` values; transport failures,
  retry exhaustion and bad ``Retry-After`` directives are raised.

Only an ``Accept: application/<format>`` header is sent with each request.

See Also:
    :class:`~smartfetch.client.async_fetcher.AsyncSmartFetcher` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import httpx

from smartfetch.cache import CacheGateway, DiskStore, Store
from smartfetch.exceptions import ConfigError, DecodeError, TerminalServerFailure
from smartfetch.models import FetchOptions, ResponseFormat, resolve_options
from smartfetch.results import FetchResult, Ok, ServerError
from smartfetch.retry import BackoffStrategy, RetryController

logger = logging.getLogger(__name__)


def decode_body(response: httpx.Response, fmt: ResponseFormat) -> Any:
    """Decode a successful response body.

    Raises:
        DecodeError: If the body is not valid for *fmt*.
    """
    if fmt is ResponseFormat.TEXT:
        return response.text
    if fmt is ResponseFormat.BYTES:
        return response.content
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(f"Response from {response.url} is not valid JSON: {exc}") from exc


def safe_headers(options: FetchOptions) -> dict[str, str]:
    """The only request headers a fetch ever sends."""
    return {"Accept": options.format.accept}


def check_store(store: Store, options: FetchOptions) -> None:
    """Reject a format whose bodies *store* cannot hold.

    Raises:
        ConfigError: For ``format="bytes"`` with a JSON-only :class:`DiskStore`.
    """
    if options.format is ResponseFormat.BYTES and isinstance(store, DiskStore):
        raise ConfigError(
            "DiskStore keeps JSON text and cannot hold bytes bodies; "
            "use MemoryStore or a custom store with format=\"bytes\""
        )


def resolve_terminal(exc: TerminalServerFailure) -> ServerError:
    """Turn a status-bearing terminal failure into a result; re-raise otherwise."""
    if exc.status_code is None:
        raise exc
    return ServerError(exc.failure)


class SmartFetcher:
    """Blocking fetcher with memoization and retry.

    Must be used as a context manager so that an owned
    :class:`httpx.Client` is opened and closed.  A caller-supplied client
    is used as-is and never closed.

    Args:
        store: Key-value capability holding decoded bodies keyed by URL.
        options: Retry, decoding and timeout settings.
        client: Optional pre-built :class:`httpx.Client`.
        backoff: Optional backoff strategy (e.g. with a seeded RNG).
        sleep: Optional blocking sleep used between attempts.

    Example::

        with SmartFetcher(MemoryStore(), FetchOptions(max_tries=3)) as fetcher:
            result = fetcher.fetch("https://api.example.com/data")
    """

    def __init__(
        self,
        store: Store,
        options: Optional[FetchOptions] = None,
        *,
        client: Optional[httpx.Client] = None,
        backoff: Optional[BackoffStrategy] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self._options = options if options is not None else FetchOptions()
        check_store(store, self._options)
        self._gateway = CacheGateway(store)
        self._client = client
        self._owns_client = client is None
        backoff = backoff if backoff is not None else BackoffStrategy(self._options.max_timeout)
        self._controller = RetryController(self._send, backoff, sleep or time.sleep)

    @property
    def options(self) -> FetchOptions:
        return self._options

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SmartFetcher:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._options.timeout,
                follow_redirects=True,
            )
        return self

    def __exit__(self, *args: object) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def fetch(self, url: str) -> FetchResult:
        """GET *url*, serving from the store when possible.

        Returns:
            :class:`~smartfetch.results.Ok` with the decoded body, or
            :class:`~smartfetch.results.ServerError` for a non-retryable
            HTTP failure.

        Raises:
            RetryLimitExceeded: If all attempts failed transiently.
            RetryAfterError: If the server's ``Retry-After`` is unusable.
            TerminalServerFailure: On a transport error (no HTTP status).
            DecodeError: If the body cannot be decoded.
        """
        cached = self._gateway.lookup(url)
        if cached is not None:
            return Ok(cached, cached=True)

        try:
            response = self._controller.attempt(url, self._options.max_tries)
        except TerminalServerFailure as exc:
            return resolve_terminal(exc)

        body = decode_body(response, self._options.format)
        return Ok(self._gateway.commit(url, body))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _send(self, url: str) -> httpx.Response:
        assert self._client is not None, "Fetcher not initialised -- use as context manager"
        logger.debug("GET %s", url)
        return self._client.get(url, headers=safe_headers(self._options))


def smartfetch(
    url: str,
    *,
    store: Store,
    options: Optional[FetchOptions] = None,
    client: Optional[httpx.Client] = None,
    **overrides: Any,
) -> FetchResult:
    """Fetch *url* once, with memoization and retry.

    Keyword *overrides* (``max_tries``, ``format``, ``max_timeout``,
    ``timeout``) are merged into *options*.

    Example::

        result = smartfetch("https://api.example.com/data", store=MemoryStore(), max_tries=3)
    """
    resolved = resolve_options(options, **overrides)
    with SmartFetcher(store, resolved, client=client) as fetcher:
        return fetcher.fetch(url)
