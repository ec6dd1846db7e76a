"""Bounded retry loops around a single network primitive.

:class:`RetryController` (blocking) and :class:`AsyncRetryController`
(``await``-based) share the same decision logic:

1. If ``tries >= max_tries`` raise :class:`~smartfetch.exceptions.RetryLimitExceeded`
   before touching the network, so ``max_tries=0`` never sends a request.
2. Send the request.  A 2xx response is returned as-is.
3. A non-2xx response or an :class:`httpx.TransportError` becomes a
   :class:`~smartfetch.results.FailureDescriptor` and is classified.
   Terminal failures are raised as
   :class:`~smartfetch.exceptions.TerminalServerFailure`; retryable ones
   are absorbed, the backoff delay is slept, and the loop continues.

Only the number of attempts is bounded; there is no overall deadline.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

import httpx

from smartfetch.exceptions import RetryLimitExceeded, ServerFailure, TerminalServerFailure
from smartfetch.results import FailureDescriptor
from smartfetch.retry.backoff import BackoffStrategy
from smartfetch.retry.classifier import classify

logger = logging.getLogger(__name__)


def _failure_from(url: str, exc: httpx.HTTPError) -> FailureDescriptor:
    if isinstance(exc, httpx.HTTPStatusError):
        return FailureDescriptor.from_response(url, exc.response)
    return FailureDescriptor.from_transport_error(url, exc)


class _RetryPolicy:
    """Decision logic shared by the sync and async controllers."""

    def __init__(self, backoff: BackoffStrategy) -> None:
        self._backoff = backoff

    @staticmethod
    def check_budget(tries: int, max_tries: int) -> None:
        if tries >= max_tries:
            logger.warning("Giving up after %d attempt(s)", tries)
            raise RetryLimitExceeded(max_tries)

    def next_delay(self, url: str, exc: httpx.HTTPError, tries: int) -> float:
        """Return seconds to wait before retrying, or raise if *exc* is terminal."""
        error: ServerFailure = classify(_failure_from(url, exc))
        if isinstance(error, TerminalServerFailure):
            logger.info("Not retrying %s: %s", url, error)
            raise error from exc

        delay_ms = self._backoff.delay_before_next_attempt(error.failure, tries)
        logger.debug(
            "%s, retrying in %dms (attempt %d)", error, delay_ms, tries + 1,
        )
        return delay_ms / 1000


class RetryController:
    """Blocking retry loop.

    Args:
        send: Performs one GET for a URL and returns the response.  May
            raise :class:`httpx.TransportError`.
        backoff: Computes the wait between attempts.
        sleep: Blocking sleep, in seconds.  Defaults to :func:`time.sleep`.
    """

    def __init__(
        self,
        send: Callable[[str], httpx.Response],
        backoff: BackoffStrategy,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._send = send
        self._policy = _RetryPolicy(backoff)
        self._sleep = sleep

    def attempt(self, url: str, max_tries: int) -> httpx.Response:
        """Return the first 2xx response for *url* within *max_tries* attempts.

        Raises:
            RetryLimitExceeded: If every allowed attempt failed transiently.
            TerminalServerFailure: On a failure that is not worth retrying.
            RetryAfterError: If the server's ``Retry-After`` is unusable.
        """
        tries = 0
        while True:
            self._policy.check_budget(tries, max_tries)
            try:
                response = self._send(url)
                response.raise_for_status()
                return response
            except (httpx.HTTPStatusError, httpx.TransportError) as exc:
                delay = self._policy.next_delay(url, exc, tries)
            self._sleep(delay)
            tries += 1


class AsyncRetryController:
    """Non-blocking retry loop; mirrors :class:`RetryController`.

    Args:
        send: Coroutine function performing one GET for a URL.
        backoff: Computes the wait between attempts.
        sleep: Awaitable sleep, in seconds.  Defaults to :func:`asyncio.sleep`.
    """

    def __init__(
        self,
        send: Callable[[str], Awaitable[httpx.Response]],
        backoff: BackoffStrategy,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._send = send
        self._policy = _RetryPolicy(backoff)
        self._sleep = sleep

    async def attempt(self, url: str, max_tries: int) -> httpx.Response:
        """Async :meth:`RetryController.attempt`."""
        tries = 0
        while True:
            self._policy.check_budget(tries, max_tries)
            try:
                response = await self._send(url)
                response.raise_for_status()
                return response
            except (httpx.HTTPStatusError, httpx.TransportError) as exc:
                delay = self._policy.next_delay(url, exc, tries)
            await self._sleep(delay)
            tries += 1
