from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable

from loguru import logger

from metadata_snapshot.app.constants import (
    BRANCH,
    ECS_AGENT_PORT,
    INSTANCE_IDENTITY_URL,
    INVALID_ROLE_ARN,
    LOCAL_IPV4_URL,
    METADATA_URL,
    NO_RELATIVE_URI_ROLE_ARN,
    ROLE_ARN_KEY,
    TASK_ROLE_URL,
    USER_DATA_URL,
)
from metadata_snapshot.app.core import SERVICE_NAME
from metadata_snapshot.app.domain.errors import MetadataError
from metadata_snapshot.app.domain.metadata_crawler import MetadataCrawler
from metadata_snapshot.app.domain.models import (
    BranchValue,
    Directory,
    Document,
    Failure,
    KeyValue,
    Opaque,
    Snapshot,
)
from metadata_snapshot.app.infrastructure.files.container_metadata import read_container_metadata


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class SnapshotService:
    """
    Builds a fresh Snapshot of every metadata source on each call to collect().

    Branches are independent. A branch whose source is unreachable is left out
    of the snapshot, except container-metadata: once a file is configured, a
    read or parse failure is reported as that branch's value. collect() never
    raises.
    """

    def __init__(
        self,
        crawler: MetadataCrawler,
        *,
        container_metadata_file: str | Path | None = None,
        credentials_relative_uri: str | None = None,
        parallel_branches: bool = True,
    ) -> None:
        self._crawler = crawler
        self._container_metadata_file = container_metadata_file or None
        self._credentials_relative_uri = credentials_relative_uri or None
        self._parallel_branches = parallel_branches

    async def collect(self) -> Snapshot:
        branches: dict[str, Callable[[], Awaitable[BranchValue | None]]] = {
            BRANCH.META_DATA: self.meta_data,
            BRANCH.ECS_METADATA: self.ecs_metadata,
            BRANCH.INSTANCE_IDENTITY: self.instance_identity,
            BRANCH.USER_DATA: self.user_data,
            BRANCH.CONTAINER_METADATA: self.container_metadata,
        }
        if self._parallel_branches:
            values = await asyncio.gather(
                *(self._isolated(name, crawl) for name, crawl in branches.items())
            )
            results = dict(zip(branches, values))
        else:
            results = {name: await self._isolated(name, crawl) for name, crawl in branches.items()}

        snapshot = Snapshot.from_results(results)
        _log("snapshot_collected", branches=list(snapshot.branches))
        return snapshot

    async def meta_data(self) -> BranchValue | None:
        try:
            return await self._crawler.recurse(METADATA_URL)
        except MetadataError as exc:
            _log("branch_absent", branch=BRANCH.META_DATA, error=str(exc))
            return None

    async def ecs_metadata(self) -> BranchValue | None:
        local_ip = await self._local_ip()
        if not local_ip:
            _log("branch_absent", branch=BRANCH.ECS_METADATA, error="no local ipv4")
            return None
        try:
            tree = await self._crawler.recurse(f"http://{local_ip}:{ECS_AGENT_PORT}")
        except MetadataError as exc:
            _log("branch_absent", branch=BRANCH.ECS_METADATA, error=str(exc))
            return None
        if isinstance(tree, Directory):
            tree.children[ROLE_ARN_KEY] = Opaque(text=await self.task_role_arn())
        return tree

    async def instance_identity(self) -> BranchValue | None:
        return await self._single(BRANCH.INSTANCE_IDENTITY, INSTANCE_IDENTITY_URL)

    async def user_data(self) -> BranchValue | None:
        return await self._single(BRANCH.USER_DATA, USER_DATA_URL)

    async def container_metadata(self) -> BranchValue | None:
        if self._container_metadata_file is None:
            return None
        try:
            return Document(content=read_container_metadata(self._container_metadata_file))
        except MetadataError as exc:
            _log("branch_failed", branch=BRANCH.CONTAINER_METADATA, error=str(exc))
            return Failure(exc)

    async def task_role_arn(self) -> str:
        if self._credentials_relative_uri is None:
            return NO_RELATIVE_URI_ROLE_ARN
        try:
            leaf = await self._crawler.fetch_leaf(TASK_ROLE_URL + self._credentials_relative_uri)
        except MetadataError as exc:
            return str(exc)
        if isinstance(leaf, KeyValue):
            return leaf.values.get(ROLE_ARN_KEY, "")
        return INVALID_ROLE_ARN

    async def _local_ip(self) -> str:
        try:
            return (await self._crawler.fetch_text(LOCAL_IPV4_URL)).strip()
        except MetadataError:
            return ""

    async def _single(self, branch: str, url: str) -> BranchValue | None:
        try:
            return await self._crawler.fetch_leaf(url)
        except MetadataError as exc:
            _log("branch_absent", branch=branch, error=str(exc))
            return None

    async def _isolated(
        self,
        branch: str,
        crawl: Callable[[], Awaitable[BranchValue | None]],
    ) -> BranchValue | None:
        try:
            return await crawl()
        except Exception as exc:
            logger.bind(service_name=SERVICE_NAME, event="branch_crashed", branch=branch).exception(
                "branch crawl failed: {}", exc
            )
            return None
