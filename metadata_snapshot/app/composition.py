"""Composition root: build and lifecycle-manage concrete dependencies.

The only place that reads Settings; everything below receives explicit values.
"""
from __future__ import annotations

import httpx
from loguru import logger

from metadata_snapshot.app.application.snapshot_service import SnapshotService
from metadata_snapshot.app.config.settings import Settings
from metadata_snapshot.app.domain.metadata_crawler import MetadataCrawler
from metadata_snapshot.app.infrastructure.http.factory import create_http_client
from metadata_snapshot.app.ports.http_client import AbstractHttpClient


class SnapshotDependencies:
    """Holds the wired snapshot service and the HTTP client it owns."""

    def __init__(
        self,
        *,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._http_client: AbstractHttpClient | None = None
        self._snapshot_service: SnapshotService | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def snapshot_service(self) -> SnapshotService:
        if self._snapshot_service is None:
            raise RuntimeError("snapshot_service is not initialized")
        return self._snapshot_service

    async def connect(self) -> None:
        self._http_client = create_http_client(self._settings, transport=self._transport)
        crawler = MetadataCrawler(
            self._http_client,
            connect_timeout_seconds=self._settings.fetch_connect_timeout_seconds,
            read_timeout_seconds=self._settings.fetch_read_timeout_seconds,
            max_depth=self._settings.max_depth,
        )
        self._snapshot_service = SnapshotService(
            crawler,
            container_metadata_file=self._settings.container_metadata_file,
            credentials_relative_uri=self._settings.credentials_relative_uri,
            parallel_branches=self._settings.parallel_branches,
        )

    async def close(self) -> None:
        if self._http_client is not None:
            try:
                await self._http_client.close()
            except Exception as exc:
                logger.warning("http client close failed: {}", exc)
            self._http_client = None
        self._snapshot_service = None


def create_snapshot_dependencies(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SnapshotDependencies:
    return SnapshotDependencies(settings=settings or Settings(), transport=transport)
