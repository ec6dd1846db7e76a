"""Shared test fixtures for smartfetch.

Provides stores, a scripted mock transport, and a recording sleep so that
retry tests never wait on the wall clock.  These fixtures are discovered
automatically by pytest.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from smartfetch.cache import MemoryStore
from smartfetch.retry import BackoffStrategy


class ScriptedServer:
    """Plays back a fixed list of responses, one per request.

    Entries may be :class:`httpx.Response` objects or exceptions, which are
    raised instead of answering.  Every request is recorded.
    """

    def __init__(self, *replies: Any) -> None:
        self._replies = list(replies)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError(f"Unexpected request to {request.url}")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def calls(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class RecordingSleep:
    """Stand-in for :func:`time.sleep` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class AsyncRecordingSleep(RecordingSleep):
    async def __call__(self, seconds: float) -> None:  # type: ignore[override]
        self.delays.append(seconds)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def isolated_cache(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CACHE_HOME at tmp_path so tests never touch the real cache."""
    cache_home = tmp_path / "cache"
    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_home))
    monkeypatch.setattr("smartfetch.config.platform.system", lambda: "Linux")
    return cache_home


# ---------------------------------------------------------------------------
# Retry helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def async_sleep() -> AsyncRecordingSleep:
    return AsyncRecordingSleep()


@pytest.fixture
def backoff() -> BackoffStrategy:
    """Backoff with a seeded RNG and a frozen clock."""
    return BackoffStrategy(max_timeout=30, rng=random.Random(1234), clock=lambda: 1_000_000.0)


@pytest.fixture
def make_server() -> Callable[..., ScriptedServer]:
    return ScriptedServer

