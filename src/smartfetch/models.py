"""Pydantic models for smartfetch configuration.

:class:`FetchOptions` is the configuration bundle fixed for the lifetime
of one call.  Every field has a default and callers may override any
subset, either by passing a ready-made instance or keyword overrides
merged by :func:`resolve_options`::

    FetchOptions(max_tries=3)
    resolve_options(format="text")

The store is deliberately not part of this model: it is a runtime
capability and is always injected explicitly.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResponseFormat(str, enum.Enum):
    """How a successful response body is decoded."""

    JSON = "json"
    TEXT = "text"
    BYTES = "bytes"

    @property
    def accept(self) -> str:
        """Value sent in the ``Accept`` request header."""
        return f"application/{self.value}"


class FetchOptions(BaseModel):
    """Options controlling retries, decoding, and ``Retry-After`` limits."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_tries: int = Field(
        default=5, ge=0, description="Maximum number of network attempts"
    )
    format: ResponseFormat = Field(
        default=ResponseFormat.JSON, description="Response decoding: json, text, bytes"
    )
    max_timeout: float = Field(
        default=30, gt=0, description="Longest Retry-After wait honoured, in seconds"
    )
    timeout: float = Field(
        default=30, gt=0, description="Per-request transport timeout in seconds"
    )


def resolve_options(
    options: Optional[FetchOptions] = None, **overrides: Any
) -> FetchOptions:
    """Merge keyword *overrides* into *options* (or the defaults).

    Overrides are validated, so ``resolve_options(max_tries=-1)`` or a
    misspelled key such as ``resolve_options(maxTries=1)`` raises
    :class:`pydantic.ValidationError`.
    """
    base = options if options is not None else FetchOptions()
    if not overrides:
        return base
    return FetchOptions.model_validate({**base.model_dump(), **overrides})
