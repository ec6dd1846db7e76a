"""Exception hierarchy for smartfetch.

All exceptions inherit from :class:`SmartfetchError`.  Only terminal
outcomes ever reach the caller; transient server failures are absorbed by
the retry loop in :mod:`smartfetch.retry.controller`.

Subclass hierarchy::

    SmartfetchError
    +-- RetryLimitExceeded
    +-- RetryAfterError
    |   +-- InvalidRetryAfterFormat
    |   +-- RetryAfterTooLong
    +-- ServerFailure
    |   +-- RetryableServerFailure
    |   +-- TerminalServerFailure
    +-- DecodeError
    +-- ConfigError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from smartfetch.results import FailureDescriptor


class SmartfetchError(Exception):
    """Base exception for all smartfetch errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RetryLimitExceeded(SmartfetchError):
    """Raised when every allowed attempt failed without a usable response.

    Args:
        max_tries: The configured attempt limit that was exhausted.
    """

    def __init__(self, max_tries: int):
        super().__init__(
            f"Polling limit ({max_tries}) was exceeded without getting a valid response"
        )
        self.max_tries = max_tries


class RetryAfterError(SmartfetchError):
    """Base class for unusable ``Retry-After`` directives.

    Attributes:
        value: The raw header value sent by the server.
    """

    def __init__(self, message: str, value: str):
        super().__init__(message)
        self.value = value


class InvalidRetryAfterFormat(RetryAfterError):
    """Raised when ``Retry-After`` is neither an HTTP-date nor a number of seconds."""

    def __init__(self, value: str):
        super().__init__(
            f"Retry-After header has an invalid format, cannot retry: {value!r}",
            value,
        )


class RetryAfterTooLong(RetryAfterError):
    """Raised when ``Retry-After`` asks for a wait longer than ``max_timeout``."""

    def __init__(self, value: str, max_timeout: float):
        super().__init__(
            f"Retry-After header exceeds maximum timeout length ({max_timeout}s): {value!r}",
            value,
        )
        self.max_timeout = max_timeout


class ServerFailure(SmartfetchError):
    """A failed request, either a non-2xx response or a transport error.

    Args:
        failure: Description of what the server (or transport) reported.
    """

    def __init__(self, failure: FailureDescriptor, message: Optional[str] = None):
        super().__init__(message or _describe(failure))
        self.failure = failure

    @property
    def status_code(self) -> Optional[int]:
        return self.failure.status_code


class RetryableServerFailure(ServerFailure):
    """A transient failure.  Never surfaced to callers."""


class TerminalServerFailure(ServerFailure):
    """A failure that will not be retried.

    Status-bearing terminal failures are turned into
    :class:`~smartfetch.results.ServerError` results by the fetcher; only
    statusless ones (pure transport errors) are raised.
    """


class DecodeError(SmartfetchError):
    """Raised when a successful response body cannot be decoded."""


class ConfigError(SmartfetchError):
    """Raised for invalid option files or an option set the store cannot hold."""


def _describe(failure: FailureDescriptor) -> str:
    if failure.status_code is None:
        return f"Request to {failure.url} failed: {failure.reason or 'transport error'}"
    text = f" {failure.status_text}" if failure.status_text else ""
    return f"Request to {failure.url} failed with HTTP {failure.status_code}{text}"
