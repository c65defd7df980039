from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Awaitable, Callable

import httpx
import pytest
from fastapi import FastAPI
from loguru import logger

from metadata_snapshot.app.constants import DEFAULT_MAX_DEPTH
from metadata_snapshot.app.domain.metadata_crawler import MetadataCrawler
from metadata_snapshot.app.domain.models import Snapshot
from metadata_snapshot.app.infrastructure.http.httpx_client import HttpxHttpClient
from metadata_snapshot.app.ports.http_client import RequestTimeout
from metadata_snapshot.app.routers.health import health_router
from metadata_snapshot.app.routers.metadata import debug_router


def normalize_url(url: str | httpx.URL) -> str:
    """Collapse repeated slashes so routes can be written the way AWS documents them."""
    parsed = httpx.URL(url) if isinstance(url, str) else url
    port = f":{parsed.port}" if parsed.port else ""
    path = re.sub(r"/{2,}", "/", parsed.path or "/")
    return f"{parsed.scheme}://{parsed.host}{port}{path}"


class MetadataServer:
    """In-memory metadata service behind httpx.MockTransport.

    Routes map a URL to a body (200), a (status, body) tuple, or an exception
    class to raise. Unknown URLs answer 404.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self._routes: dict[str, Any] = {}
        self.requested: list[str] = []
        for url, answer in (routes or {}).items():
            self.route(url, answer)

    def route(self, url: str, answer: Any) -> None:
        if isinstance(answer, (dict, list)):
            answer = json.dumps(answer)
        self._routes[normalize_url(url)] = answer

    def was_requested(self, url: str) -> bool:
        return normalize_url(url) in self.requested

    def _handle(self, request: httpx.Request) -> httpx.Response:
        key = normalize_url(request.url)
        self.requested.append(key)
        answer = self._routes.get(key)
        if answer is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(answer, type) and issubclass(answer, httpx.HTTPError):
            raise answer("simulated failure", request=request)
        if isinstance(answer, tuple):
            status, body = answer
            return httpx.Response(status, text=body)
        return httpx.Response(200, text=answer)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


def run_crawler(
    server: MetadataServer,
    action: Callable[[MetadataCrawler], Awaitable[Any]],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """Run action against a crawler wired to server through the real httpx adapter."""

    async def _run() -> Any:
        client = HttpxHttpClient(httpx.AsyncClient(transport=server.transport()))
        crawler = MetadataCrawler(client, 0.2, 0.2, max_depth=max_depth)
        try:
            return await action(crawler)
        finally:
            await client.close()

    return asyncio.run(_run())


class FakeResponse:
    """Implements HttpResponse; records whether it was closed."""

    def __init__(
        self,
        url: str,
        body: bytes = b"",
        *,
        status_code: int = 200,
        raise_on_close: Exception | None = None,
        raise_on_read: Exception | None = None,
    ) -> None:
        self._url = url
        self._body = body
        self._status_code = status_code
        self._raise_on_close = raise_on_close
        self._raise_on_read = raise_on_read
        self.read = False
        self.closed = False

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def url(self) -> str:
        return self._url

    async def aread(self) -> bytes:
        self.read = True
        if self._raise_on_read is not None:
            raise self._raise_on_read
        return self._body

    async def aclose(self) -> None:
        self.closed = True
        if self._raise_on_close is not None:
            raise self._raise_on_close


class FakeHttpClient:
    """Implements AbstractHttpClient by handing out prepared FakeResponse objects."""

    def __init__(self, responses: dict[str, FakeResponse]) -> None:
        self._responses = responses
        self.timeouts: list[RequestTimeout] = []
        self.requested: list[str] = []

    async def get(self, url: str, *, timeout: RequestTimeout) -> FakeResponse:
        self.timeouts.append(timeout)
        self.requested.append(url)
        return self._responses.get(url) or FakeResponse(url, b"Not Found", status_code=404)

    async def close(self) -> None:
        return None


class FakeSnapshotService:
    """Implements the part of SnapshotService the routers use; counts crawls."""

    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self._snapshot = snapshot or Snapshot(branches={})
        self.calls = 0

    async def collect(self) -> Snapshot:
        self.calls += 1
        return self._snapshot


@pytest.fixture()
def server() -> MetadataServer:
    return MetadataServer()


@pytest.fixture()
def captured_logs():
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture()
def test_app() -> FastAPI:
    app = FastAPI()
    app.state.snapshot_service = FakeSnapshotService()
    app.include_router(health_router)
    app.include_router(debug_router)
    return app
