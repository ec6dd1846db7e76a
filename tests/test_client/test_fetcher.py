"""Tests for the blocking fetcher and the smartfetch() helper."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
from pydantic import ValidationError

from smartfetch import (
    DecodeError,
    FetchOptions,
    InvalidRetryAfterFormat,
    MemoryStore,
    Ok,
    RetryLimitExceeded,
    ServerError,
    SmartFetcher,
    TerminalServerFailure,
    smartfetch,
)
from smartfetch.cache import DiskStore
from smartfetch.exceptions import ConfigError

URL = "https://api.example.com/data"


class AsyncStore:
    """Store exposing coroutine get/set."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    async def get(self, key: str) -> Any:
        return self.data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = value


def _fetcher(server, store, sleep, **options) -> SmartFetcher:
    return SmartFetcher(
        store,
        FetchOptions(**options),
        client=server.client(),
        sleep=sleep,
    )


# ------------------------------------------------------------------ #
# Cache short-circuit
# ------------------------------------------------------------------ #


class TestCacheShortCircuit:
    def test_cached_value_skips_network(self, make_server, store: MemoryStore, sleep) -> None:
        store.set(URL, {"cached": True})
        server = make_server()
        with _fetcher(server, store, sleep) as fetcher:
            result = fetcher.fetch(URL)
        assert result == Ok({"cached": True}, cached=True)
        assert server.calls == 0

    @pytest.mark.parametrize("value", [0, "", False])
    def test_falsy_cached_value_is_a_hit(self, make_server, store: MemoryStore, sleep, value) -> None:
        store.set(URL, value)
        server = make_server()
        with _fetcher(server, store, sleep) as fetcher:
            assert fetcher.fetch(URL).body == value
        assert server.calls == 0

    def test_second_call_served_from_store(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(200, json={"n": 1}))
        with _fetcher(server, store, sleep) as fetcher:
            first = fetcher.fetch(URL)
            second = fetcher.fetch(URL)
        assert first == Ok({"n": 1})
        assert second == Ok({"n": 1}, cached=True)
        assert server.calls == 1

    def test_cache_hit_works_without_context_manager(self, store: MemoryStore) -> None:
        store.set(URL, [1, 2, 3])
        assert SmartFetcher(store).fetch(URL).body == [1, 2, 3]


# ------------------------------------------------------------------ #
# Retry scenarios
# ------------------------------------------------------------------ #


class TestRetryScenarios:
    def test_three_503_then_success(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(
            httpx.Response(503),
            httpx.Response(503),
            httpx.Response(503),
            httpx.Response(200, json={"ok": True}),
        )
        with _fetcher(server, store, sleep) as fetcher:
            result = fetcher.fetch(URL)
        assert isinstance(result, Ok)
        assert result.body == {"ok": True}
        assert result.cached is False
        assert store.get(URL) == {"ok": True}
        assert server.calls == 4
        assert len(sleep.delays) == 3

    def test_max_tries_bounds_network_calls(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(*[httpx.Response(500) for _ in range(2)])
        with _fetcher(server, store, sleep, max_tries=2) as fetcher:
            with pytest.raises(RetryLimitExceeded):
                fetcher.fetch(URL)
        assert server.calls == 2
        assert store.get(URL) is None

    def test_zero_max_tries(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server()
        with _fetcher(server, store, sleep, max_tries=0) as fetcher:
            with pytest.raises(RetryLimitExceeded):
                fetcher.fetch(URL)
        assert server.calls == 0

    def test_retry_after_honoured(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(
            httpx.Response(429, headers={"Retry-After": "120"}),
            httpx.Response(200, json="later"),
        )
        with _fetcher(server, store, sleep, max_timeout=150) as fetcher:
            assert fetcher.fetch(URL) == Ok("later")
        assert sleep.delays == [120.0]

    def test_invalid_retry_after_raised(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(503, headers={"Retry-After": "not-a-date"}))
        with _fetcher(server, store, sleep) as fetcher:
            with pytest.raises(InvalidRetryAfterFormat):
                fetcher.fetch(URL)


# ------------------------------------------------------------------ #
# Terminal failures
# ------------------------------------------------------------------ #


class TestTerminalFailures:
    def test_404_returned_not_raised(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(404, json={"error": "missing"}))
        with _fetcher(server, store, sleep) as fetcher:
            result = fetcher.fetch(URL)
        assert isinstance(result, ServerError)
        assert result.ok is False
        assert result.status_code == 404
        assert result.status_text == "Not Found"
        assert store.get(URL) is None
        assert server.calls == 1

    def test_transport_error_raised(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.ReadTimeout("timed out"))
        with _fetcher(server, store, sleep) as fetcher:
            with pytest.raises(TerminalServerFailure) as exc_info:
                fetcher.fetch(URL)
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)


# ------------------------------------------------------------------ #
# Request shape and decoding
# ------------------------------------------------------------------ #


class TestRequestAndDecoding:
    def test_only_accept_header_is_requested(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(200, text="hi"))
        with _fetcher(server, store, sleep, format="text") as fetcher:
            fetcher.fetch(URL)
        request = server.requests[0]
        assert request.method == "GET"
        assert str(request.url) == URL
        assert request.headers["accept"] == "application/text"

    def test_json_accept_header_by_default(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(200, json={}))
        with _fetcher(server, store, sleep) as fetcher:
            fetcher.fetch(URL)
        assert server.requests[0].headers["accept"] == "application/json"

    def test_text_format(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(200, text="<p>hello</p>"))
        with _fetcher(server, store, sleep, format="text") as fetcher:
            assert fetcher.fetch(URL).body == "<p>hello</p>"

    def test_bytes_format(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(200, content=b"\x00\x01"))
        with _fetcher(server, store, sleep, format="bytes") as fetcher:
            assert fetcher.fetch(URL).body == b"\x00\x01"
        assert store.get(URL) == b"\x00\x01"

    def test_invalid_json_raises_decode_error(self, make_server, store: MemoryStore, sleep) -> None:
        server = make_server(httpx.Response(200, text="not json"))
        with _fetcher(server, store, sleep) as fetcher:
            with pytest.raises(DecodeError):
                fetcher.fetch(URL)
        assert store.get(URL) is None


# ------------------------------------------------------------------ #
# Client lifecycle
# ------------------------------------------------------------------ #


class TestClientLifecycle:
    def test_owned_client_created_and_closed(self, store: MemoryStore) -> None:
        fetcher = SmartFetcher(store)
        assert fetcher._client is None
        with fetcher:
            assert isinstance(fetcher._client, httpx.Client)
        assert fetcher._client is None

    def test_supplied_client_left_open(self, store: MemoryStore) -> None:
        client = MagicMock(spec=httpx.Client)
        with SmartFetcher(store, client=client):
            pass
        client.close.assert_not_called()

    def test_fetch_outside_context_manager_fails_on_miss(self, store: MemoryStore) -> None:
        with pytest.raises(AssertionError):
            SmartFetcher(store).fetch(URL)

    def test_async_store_rejected_before_network(self, make_server, sleep) -> None:
        server = make_server(httpx.Response(200, json={"ok": True}))
        store = AsyncStore()
        with pytest.raises(TypeError, match="AsyncSmartFetcher"):
            _fetcher(server, store, sleep).fetch(URL)
        assert server.calls == 0
        assert store.data == {}

    def test_bytes_format_rejected_for_disk_store(self, tmp_path) -> None:
        with DiskStore(tmp_path / "store") as store:
            with pytest.raises(ConfigError, match="bytes"):
                SmartFetcher(store, FetchOptions(format="bytes"))


# ------------------------------------------------------------------ #
# smartfetch() helper
# ------------------------------------------------------------------ #


class TestSmartfetchHelper:
    def test_overrides_are_applied(self, make_server, store: MemoryStore) -> None:
        server = make_server(httpx.Response(200, text="plain"))
        result = smartfetch(URL, store=store, client=server.client(), format="text")
        assert result == Ok("plain")
        assert store.get(URL) == "plain"

    def test_invalid_override_rejected(self, store: MemoryStore) -> None:
        with pytest.raises(ValidationError):
            smartfetch(URL, store=store, max_tries=-1)

    def test_misspelled_override_rejected(self, make_server, store: MemoryStore) -> None:
        server = make_server(httpx.Response(200, json=1))
        with pytest.raises(ValidationError):
            smartfetch(URL, store=store, client=server.client(), max_try=1)
        assert server.calls == 0

    def test_store_is_required(self) -> None:
        with pytest.raises(TypeError):
            smartfetch(URL)  # type: ignore[call-arg]

    def test_retries_use_time_sleep(self, make_server, store: MemoryStore, monkeypatch) -> None:
        delays: list[float] = []
        monkeypatch.setattr("smartfetch.client.fetcher.time.sleep", delays.append)
        server = make_server(httpx.Response(503), httpx.Response(200, json=1))
        assert smartfetch(URL, store=store, client=server.client()) == Ok(1)
        assert len(delays) == 1

    def test_disk_store_persists_between_calls(self, make_server, tmp_path) -> None:
        server = make_server(httpx.Response(200, json={"ok": True}))
        with DiskStore(tmp_path / "store") as store:
            smartfetch(URL, store=store, client=server.client())
        with DiskStore(tmp_path / "store") as store:
            result = smartfetch(URL, store=store, client=server.client())
        assert result == Ok({"ok": True}, cached=True)
        assert server.calls == 1
