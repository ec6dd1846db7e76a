"""Failure descriptors and the tagged result type returned by fetches.

A fetch ends in exactly one of three ways:

* :class:`Ok` -- the decoded body (fresh from the network or from the store).
* :class:`ServerError` -- the server answered with a status we will not
  retry (e.g. ``404 Not Found``).  Returned, not raised, so callers can
  branch on the result without ``try``/``except``.
* an exception from :mod:`smartfetch.exceptions` -- retry exhaustion, an
  unusable ``Retry-After`` directive, or a transport failure.

Example::

    result = smartfetch(url, store=store)
    if isinstance(result, Ok):
        use(result.body)
    else:
        log(result.failure.status_code)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

import httpx

T = TypeVar("T")


@dataclass(frozen=True)
class FailureDescriptor:
    """What a failed request reported.

    Attributes:
        url: The requested URL.
        status_code: HTTP status, or ``None`` for transport errors.
        status_text: HTTP reason phrase; ``None`` for transport errors.
        headers: Response headers; empty for transport errors.
        reason: Transport error text.  Never used for classification.
    """

    url: str
    status_code: Optional[int] = None
    status_text: Optional[str] = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    reason: Optional[str] = None

    @classmethod
    def from_response(cls, url: str, response: httpx.Response) -> FailureDescriptor:
        return cls(
            url=url,
            status_code=response.status_code,
            status_text=response.reason_phrase or None,
            headers=response.headers,
        )

    @classmethod
    def from_transport_error(cls, url: str, exc: httpx.TransportError) -> FailureDescriptor:
        return cls(url=url, reason=str(exc) or type(exc).__name__)

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successfully decoded body."""

    body: T
    cached: bool = False

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ServerError:
    """A non-retryable HTTP failure, returned as a value."""

    failure: FailureDescriptor

    @property
    def ok(self) -> bool:
        return False

    @property
    def status_code(self) -> Optional[int]:
        return self.failure.status_code

    @property
    def status_text(self) -> Optional[str]:
        return self.failure.status_text


FetchResult = Union[Ok[Any], ServerError]
