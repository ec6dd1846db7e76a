"""Fetchers for smartfetch.

Provides blocking and non-blocking fetchers that wrap :mod:`httpx` with
memoization in a caller-supplied store and retry with backoff.

Classes:
    :class:`SmartFetcher` -- blocking fetcher backed by :class:`httpx.Client`.
    :class:`AsyncSmartFetcher` -- non-blocking fetcher backed by :class:`httpx.AsyncClient`.

Functions:
    :func:`smartfetch` / :func:`async_smartfetch` -- one-shot helpers that
    open a fetcher, fetch a single URL, and close it again.
"""

from smartfetch.client.async_fetcher import AsyncSmartFetcher, async_smartfetch
from smartfetch.client.fetcher import SmartFetcher, smartfetch

__all__ = ["AsyncSmartFetcher", "SmartFetcher", "async_smartfetch", "smartfetch"]
