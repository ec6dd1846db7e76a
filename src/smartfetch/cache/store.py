"""Key-value store capabilities used to memoize decoded responses.

Any object with ``get(key)`` and ``set(key, value)`` satisfies
:class:`Store`.  Two implementations ship with the package:

* :class:`MemoryStore` -- a plain dict, useful for tests and short-lived
  processes.
* :class:`DiskStore` -- persists JSON-serialised values on disk using
  :mod:`diskcache`, so memoized responses survive restarts.

Entries never expire and are never overwritten by the fetcher once a
value has been committed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

import diskcache

from smartfetch.config import get_cache_dir

logger = logging.getLogger(__name__)


@runtime_checkable
class Store(Protocol):
    """The get/set capability the cache gateway relies on.

    ``get`` returns ``None`` for an absent key.  Async callers may supply
    a store whose methods are coroutine functions.
    """

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> Any: ...


class MemoryStore:
    """Process-local store backed by a dict."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._data.get(str(key))

    def set(self, key: str, value: Any) -> None:
        self._data[str(key)] = value

    def __contains__(self, key: object) -> bool:
        return str(key) in self._data

    def __len__(self) -> int:
        return len(self._data)


class DiskStore:
    """Disk-backed store for decoded response bodies.

    Values are stored as JSON text in a :class:`diskcache.Cache`
    directory, so only JSON-compatible values (the output of the ``json``
    and ``text`` formats) can be stored.

    Args:
        directory: Cache directory.  Defaults to ``<cache dir>/store``
            (see :func:`~smartfetch.config.get_cache_dir`).

    Example::

        with DiskStore("/tmp/smartfetch") as store:
            result = smartfetch("https://api.example.com/data", store=store)
    """

    def __init__(self, directory: Optional[str | Path] = None) -> None:
        self._directory = Path(directory) if directory is not None else get_cache_dir() / "store"
        self._cache = diskcache.Cache(str(self._directory))

    @property
    def directory(self) -> Path:
        return self._directory

    def get(self, key: str) -> Any:
        raw = self._cache.get(str(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable store entry for %s", key)
            return None

    def set(self, key: str, value: Any) -> None:
        self._cache.set(str(key), json.dumps(value))

    def __len__(self) -> int:
        return len(self._cache)

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()

    def __enter__(self) -> DiskStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
