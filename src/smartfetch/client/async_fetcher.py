"""Asynchronous fetcher -- mirrors :class:`~smartfetch.client.fetcher.SmartFetcher`.

:class:`AsyncSmartFetcher` offers the same memoization, retry and error
mapping but uses :class:`httpx.AsyncClient` and :func:`asyncio.sleep`.
The store may be either synchronous or expose coroutine ``get``/``set``
methods; both are awaited correctly.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from smartfetch.cache import CacheGateway, Store
from smartfetch.client.fetcher import check_store, decode_body, resolve_terminal, safe_headers
from smartfetch.exceptions import TerminalServerFailure
from smartfetch.models import FetchOptions, resolve_options
from smartfetch.results import FetchResult, Ok
from smartfetch.retry import AsyncRetryController, BackoffStrategy

logger = logging.getLogger(__name__)


class AsyncSmartFetcher:
    """Non-blocking fetcher with memoization and retry.

    Must be used as an async context manager.  Arguments are the same as
    for :class:`~smartfetch.client.fetcher.SmartFetcher`, with *client*
    an :class:`httpx.AsyncClient` and *sleep* an awaitable.

    Example::

        async with AsyncSmartFetcher(MemoryStore()) as fetcher:
            result = await fetcher.fetch("https://api.example.com/data")
    """

    def __init__(
        self,
        store: Store,
        options: Optional[FetchOptions] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        backoff: Optional[BackoffStrategy] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        self._options = options if options is not None else FetchOptions()
        check_store(store, self._options)
        self._gateway = CacheGateway(store)
        self._client = client
        self._owns_client = client is None
        backoff = backoff if backoff is not None else BackoffStrategy(self._options.max_timeout)
        self._controller = AsyncRetryController(self._send, backoff, sleep or asyncio.sleep)

    @property
    def options(self) -> FetchOptions:
        return self._options

    async def __aenter__(self) -> AsyncSmartFetcher:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._options.timeout,
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> FetchResult:
        """Async :meth:`~smartfetch.client.fetcher.SmartFetcher.fetch`."""
        cached = await self._gateway.alookup(url)
        if cached is not None:
            return Ok(cached, cached=True)

        try:
            response = await self._controller.attempt(url, self._options.max_tries)
        except TerminalServerFailure as exc:
            return resolve_terminal(exc)

        body = decode_body(response, self._options.format)
        return Ok(await self._gateway.acommit(url, body))

    async def _send(self, url: str) -> httpx.Response:
        assert self._client is not None, "Fetcher not initialised -- use as async context manager"
        logger.debug("GET %s", url)
        return await self._client.get(url, headers=safe_headers(self._options))


async def async_smartfetch(
    url: str,
    *,
    store: Store,
    options: Optional[FetchOptions] = None,
    client: Optional[httpx.AsyncClient] = None,
    **overrides: Any,
) -> FetchResult:
    """Async counterpart of :func:`~smartfetch.client.fetcher.smartfetch`."""
    resolved = resolve_options(options, **overrides)
    async with AsyncSmartFetcher(store, resolved, client=client) as fetcher:
        return await fetcher.fetch(url)
