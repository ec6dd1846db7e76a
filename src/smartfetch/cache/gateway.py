"""Cache-before-network gateway.

The gateway is consulted once before any network activity and once after
a successful decode.  Only ``None`` counts as a miss; falsy values such as
``0``, ``""`` or ``[]`` are genuine hits.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

from smartfetch.cache.store import Store

logger = logging.getLogger(__name__)


class CacheGateway:
    """Reads and writes memoized bodies keyed by the exact URL string."""

    def __init__(self, store: Store) -> None:
        if store is None:
            raise TypeError("A store is required")
        self._store = store

    @property
    def store(self) -> Store:
        return self._store

    def lookup(self, url: str) -> Any:
        """Return the stored value for *url*, or ``None`` on a miss.

        Raises:
            TypeError: If the store is asynchronous.
        """
        value = _require_sync(self._store.get(url), "get")
        if value is not None:
            logger.debug("Cache hit: %s", url)
        return value

    def commit(self, url: str, value: Any) -> Any:
        """Store *value* under *url* and hand it back unchanged."""
        _require_sync(self._store.set(url, value), "set")
        logger.debug("Cached response for %s", url)
        return value

    async def alookup(self, url: str) -> Any:
        """Async :meth:`lookup`; awaits the store if its ``get`` is a coroutine."""
        value = self._store.get(url)
        if inspect.isawaitable(value):
            value = await value
        if value is not None:
            logger.debug("Cache hit: %s", url)
        return value

    async def acommit(self, url: str, value: Any) -> Any:
        """Async :meth:`commit`; awaits the store if its ``set`` is a coroutine."""
        outcome = self._store.set(url, value)
        if inspect.isawaitable(outcome):
            await outcome
        logger.debug("Cached response for %s", url)
        return value


def _require_sync(outcome: Any, method: str) -> Any:
    if inspect.isawaitable(outcome):
        if inspect.iscoroutine(outcome):
            outcome.close()
        raise TypeError(
            f"Store.{method}() returned an awaitable; use AsyncSmartFetcher "
            "or async_smartfetch with an asynchronous store"
        )
    return outcome
