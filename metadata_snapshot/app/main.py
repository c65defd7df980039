from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from metadata_snapshot import __version__
from metadata_snapshot.app.composition import create_snapshot_dependencies
from metadata_snapshot.app.core import SERVICE_NAME
from metadata_snapshot.app.routers.health import health_router
from metadata_snapshot.app.routers.metadata import debug_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.bind(service_name=SERVICE_NAME, event="api_starting").info("")
    dependencies = create_snapshot_dependencies()
    await dependencies.connect()
    try:
        app.state.settings = dependencies.settings
        app.state.snapshot_service = dependencies.snapshot_service
        yield
    finally:
        logger.bind(service_name=SERVICE_NAME, event="api_stopping").info("")
        await dependencies.close()


app = FastAPI(
    title="Metadata Snapshot",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(debug_router)
