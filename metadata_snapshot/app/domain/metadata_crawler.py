"""Metadata crawler: walks a link-local metadata directory into a node tree.

Uses the HTTP port (AbstractHttpClient); the client is built in the composition
root. The metadata services expose differently shaped bodies at different paths
with no usable content type, so nodes are classified by trying parses in order.
Errors below the node passed to `recurse` are stored as Failure values and
never abort sibling traversal.
"""
from __future__ import annotations

from typing import Any

from loguru import logger

from metadata_snapshot.app.constants import (
    DEFAULT_MAX_DEPTH,
    LICENSE_COMMAND,
    REDACTED,
    SECURITY_CREDENTIALS_SEGMENT,
    SENSITIVE_KEYS,
)
from metadata_snapshot.app.core import SERVICE_NAME
from metadata_snapshot.app.domain.errors import (
    DepthLimitError,
    MetadataError,
    NotFoundError,
    ParseError,
    TransportError,
    TransportTimeoutError,
)
from metadata_snapshot.app.domain.models import (
    Directory,
    Failure,
    KeyValue,
    Leaf,
    MetadataNode,
    Opaque,
    TaskListing,
)
from metadata_snapshot.app.ports.http_client import (
    AbstractHttpClient,
    HttpClientError,
    HttpClientTimeoutError,
    HttpResponse,
    RequestTimeout,
)
from metadata_snapshot.app.schemas.metadata import (
    parse_available_commands,
    parse_key_value,
    parse_task_listing,
)

NOT_FOUND = 404


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def redact(values: dict[str, str]) -> dict[str, str]:
    """Copy of values with credential fields masked (only those present)."""
    redacted = dict(values)
    for key in SENSITIVE_KEYS:
        if key in redacted:
            redacted[key] = REDACTED
    return redacted


def classify_leaf(body: str) -> Leaf:
    values = parse_key_value(body)
    if values is not None:
        return KeyValue(values=redact(values))
    listing = parse_task_listing(body)
    if listing is not None:
        return TaskListing.from_endpoint(listing)
    return Opaque(text=body)


class MetadataCrawler:
    """Crawls metadata URLs using an injectable AbstractHttpClient.

    Each request carries its own timeout. Directory depth below the starting
    URL is capped at max_depth; deeper directories become DepthLimitError
    failures instead of being fetched.
    """

    def __init__(
        self,
        client: AbstractHttpClient,
        connect_timeout_seconds: float,
        read_timeout_seconds: float,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._client = client
        self._timeout = RequestTimeout(
            connect_seconds=connect_timeout_seconds,
            read_seconds=read_timeout_seconds,
        )
        self._max_depth = int(max_depth)

    async def fetch_text(self, url: str) -> str:
        """GET url and return the decoded body; 404 raises NotFoundError."""
        response = await self._send(url)
        # The body is drained before release on every path, including 404.
        try:
            try:
                raw = await response.aread()
            except HttpClientError as exc:
                if response.status_code == NOT_FOUND:
                    raise NotFoundError(f"not found: {url}") from exc
                raise ParseError(f"reading body of {url} failed: {exc}") from exc
            if response.status_code == NOT_FOUND:
                raise NotFoundError(f"not found: {url}")
        finally:
            await self._close_body(response)
        return raw.decode("utf-8", errors="replace")

    async def fetch_leaf(self, url: str) -> Leaf:
        return classify_leaf(await self.fetch_text(url))

    async def recurse(self, url: str, *, depth: int = 0) -> Directory:
        body = await self.fetch_text(url)
        commands = parse_available_commands(body)
        if commands:
            return await self._follow_commands(url, commands)
        return await self._follow_listing(url, body.replace("\r\n", "\n").split("\n"), depth)

    async def _follow_commands(self, base: str, commands: list[str]) -> Directory:
        directory = Directory()
        for command in commands:
            if command == LICENSE_COMMAND:
                continue
            directory.children[command] = await self._leaf_or_failure(base + command)
        return directory

    async def _follow_listing(self, base: str, parts: list[str], depth: int) -> Directory:
        directory = Directory()
        for part in parts:
            if not part or part == SECURITY_CREDENTIALS_SEGMENT:
                continue
            child_url = base + "/" + part
            if part.endswith("/"):
                directory.children[part] = await self._directory_or_failure(child_url, depth + 1)
            else:
                directory.children[part] = await self._leaf_or_failure(child_url)
        return directory

    async def _leaf_or_failure(self, url: str) -> MetadataNode:
        try:
            return await self.fetch_leaf(url)
        except MetadataError as exc:
            return Failure(exc)

    async def _directory_or_failure(self, url: str, depth: int) -> MetadataNode:
        if depth > self._max_depth:
            _log("depth_limit_reached", url=url, max_depth=self._max_depth)
            return Failure(DepthLimitError(f"max depth {self._max_depth} exceeded at {url}"))
        try:
            return await self.recurse(url, depth=depth)
        except MetadataError as exc:
            return Failure(exc)

    async def _send(self, url: str) -> HttpResponse:
        try:
            return await self._client.get(url, timeout=self._timeout)
        except HttpClientTimeoutError as exc:
            raise TransportTimeoutError(str(exc)) from exc
        except HttpClientError as exc:
            raise TransportError(str(exc)) from exc

    async def _close_body(self, response: HttpResponse) -> None:
        try:
            await response.aclose()
        except Exception as exc:
            logger.bind(
                service_name=SERVICE_NAME,
                event="response_close_failed",
                url=response.url,
            ).warning("error ending body: {}", exc)
