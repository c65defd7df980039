from fastapi import APIRouter

health_router = APIRouter(tags=["Health"])


@health_router.get(
    "/health/live",
    summary="Liveness probe",
    description="Returns 200 if the process is running. Does not touch any metadata service.",
    responses={200: {"description": "Service is alive."}},
)
async def live() -> dict:
    return {"status": "ok"}
