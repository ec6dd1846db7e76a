"""Wait-time computation between attempts.

A server-provided ``Retry-After`` header always wins over the computed
delay.  Without one, the delay grows quadratically with the attempt
index and gets up to a second of random jitter::

    attempt 0 ->    0 -  999 ms
    attempt 1 -> 1000 - 1999 ms
    attempt 2 -> 4000 - 4999 ms

See https://developers.google.com/analytics/devguides/reporting/core/v3/errors#backoff
"""

from __future__ import annotations

import random
import re
import time
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

from smartfetch.exceptions import InvalidRetryAfterFormat, RetryAfterTooLong
from smartfetch.results import FailureDescriptor

RETRY_AFTER_HEADER = "Retry-After"

# IMF-fixdate, e.g. "Wed, 21 Oct 2015 07:28:00 GMT"
_HTTP_DATE_RE = re.compile(r"\w{3}, \d{2} \w{3} \d{4} \d{2}:\d{2}:\d{2} GMT", re.ASCII)
_SECONDS_RE = re.compile(r"^\d+$", re.ASCII)


def resolve_retry_after(value: str, max_timeout: float, now: float) -> int:
    """Turn a ``Retry-After`` header value into a delay in milliseconds.

    Args:
        value: Raw header value, either an HTTP-date or a number of seconds.
        max_timeout: Longest wait honoured, in seconds.
        now: Current POSIX timestamp, used for HTTP-date values.

    Returns:
        The delay in milliseconds.  Dates already in the past yield ``0``.

    Raises:
        RetryAfterTooLong: If the requested wait exceeds *max_timeout*.
        InvalidRetryAfterFormat: If *value* matches neither format.
    """
    text = str(value).strip()

    if _HTTP_DATE_RE.search(text):
        try:
            target = parsedate_to_datetime(text)
        except (TypeError, ValueError) as exc:
            raise InvalidRetryAfterFormat(text) from exc
        if target.tzinfo is None:
            target = target.replace(tzinfo=timezone.utc)
        delay = int((target.timestamp() - now) * 1000)
        if delay <= max_timeout * 1000:
            return max(delay, 0)
        raise RetryAfterTooLong(text, max_timeout)

    if _SECONDS_RE.match(text):
        seconds = int(text)
        if seconds <= max_timeout:
            return seconds * 1000
        raise RetryAfterTooLong(text, max_timeout)

    raise InvalidRetryAfterFormat(text)


class BackoffStrategy:
    """Computes how long to wait before the next attempt.

    Args:
        max_timeout: Ceiling for ``Retry-After`` waits, in seconds.
        rng: Source of jitter.  Defaults to an unseeded :class:`random.Random`.
        clock: Returns the current POSIX timestamp.  Defaults to :func:`time.time`.
    """

    def __init__(
        self,
        max_timeout: float = 30,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.max_timeout = max_timeout
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock if clock is not None else time.time

    def delay_before_next_attempt(self, failure: FailureDescriptor, tries: int) -> int:
        """Return the wait in milliseconds after the failed attempt *tries*."""
        if failure.has_header(RETRY_AFTER_HEADER):
            return resolve_retry_after(
                failure.header(RETRY_AFTER_HEADER) or "",
                self.max_timeout,
                self._clock(),
            )
        return self.padding(tries)

    def padding(self, tries: int) -> int:
        """Exponential delay with jitter for attempt index *tries*."""
        return tries ** 2 * 1000 + self._rng.randrange(1000)
