from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger

from metadata_snapshot.app.core import SERVICE_NAME

DEFAULT_EXPVAR_NAME = "aws"

debug_router = APIRouter(prefix="/debug", tags=["Introspection"])


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).warning("")


def expvar_name(request: Request) -> str:
    """Read the published variable name from app.state.settings or default."""
    settings = getattr(request.app.state, "settings", None)
    if settings is not None:
        return getattr(settings, "expvar_name", DEFAULT_EXPVAR_NAME)
    return DEFAULT_EXPVAR_NAME


async def _snapshot_or_none(request: Request) -> dict[str, Any] | None:
    service = getattr(request.app.state, "snapshot_service", None)
    if service is None:
        _log("snapshot_rejected", reason="snapshot_service_not_ready")
        return None
    snapshot = await service.collect()
    return snapshot.to_dict()


@debug_router.get(
    "/metadata",
    summary="Metadata snapshot",
    description="Crawls every metadata source and returns the merged snapshot. Nothing is cached; each call crawls again.",
    responses={
        200: {"description": "Snapshot of the reachable metadata sources."},
        503: {"description": "Snapshot service not initialized."},
    },
)
async def get_metadata(request: Request) -> Response:
    snapshot = await _snapshot_or_none(request)
    if snapshot is None:
        return Response(status_code=503, content="Snapshot service not available")
    return JSONResponse(snapshot)


@debug_router.get(
    "/vars",
    summary="Published variables",
    description="expvar-style view: the snapshot published under a single variable name.",
    responses={
        200: {"description": "Object holding the snapshot under the configured variable name."},
        503: {"description": "Snapshot service not initialized."},
    },
)
async def get_vars(request: Request) -> Response:
    snapshot = await _snapshot_or_none(request)
    if snapshot is None:
        return Response(status_code=503, content="Snapshot service not available")
    return JSONResponse({expvar_name(request): snapshot})
