"""Response memoization for smartfetch.

This package provides the :class:`Store` capability protocol, two store
implementations (:class:`MemoryStore` and the :mod:`diskcache`-backed
:class:`DiskStore`), and :class:`CacheGateway`, which the fetchers in
:mod:`smartfetch.client` consult before touching the network.
"""

from smartfetch.cache.gateway import CacheGateway
from smartfetch.cache.store import DiskStore, MemoryStore, Store

__all__ = ["CacheGateway", "DiskStore", "MemoryStore", "Store"]
