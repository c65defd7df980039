"""HTTP client factory: builds AbstractHttpClient from settings (no provider logic in composition)."""
from __future__ import annotations

import httpx

from metadata_snapshot.app.config.settings import Settings
from metadata_snapshot.app.infrastructure.http.httpx_client import HttpxHttpClient
from metadata_snapshot.app.ports.http_client import AbstractHttpClient


def create_http_client(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AbstractHttpClient:
    """Build an HTTP client. Timeouts are applied per-request by the adapter.

    Metadata services are link-local, so proxy environment variables are ignored.
    """
    async_client = httpx.AsyncClient(transport=transport, trust_env=False)
    return HttpxHttpClient(async_client)
