"""HTTP client port: contract for streamed GET requests against metadata services.

The crawler depends on this port; infrastructure (httpx) implements it.
Responses are returned unread so the caller decides when the body is drained
and is responsible for releasing it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class HttpClientError(Exception):
    """Base for HTTP client failures (request construction, network, body read)."""


class HttpClientTimeoutError(HttpClientError):
    """Raised when the request times out."""


@runtime_checkable
class HttpResponse(Protocol):
    """Minimal view of a streamed HTTP response."""

    @property
    def status_code(self) -> int: ...

    @property
    def url(self) -> str: ...

    async def aread(self) -> bytes:
        """Read the whole body; raise HttpClientError on failure."""
        ...

    async def aclose(self) -> None:
        """Release the underlying connection."""
        ...


@dataclass(frozen=True)
class RequestTimeout:
    """Connect and read timeouts in seconds."""

    connect_seconds: float
    read_seconds: float


@runtime_checkable
class AbstractHttpClient(Protocol):
    """Port: perform GET requests. Implementations live in infrastructure."""

    async def get(self, url: str, *, timeout: RequestTimeout) -> HttpResponse:
        """Send GET and return once headers arrive; raise HttpClientTimeoutError or HttpClientError."""
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
