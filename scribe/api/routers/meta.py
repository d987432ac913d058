from typing import Annotated

from fastapi import APIRouter, Depends

from scribe.application.meta import health_status, readiness_status, status_snapshot
from scribe.core.config import Settings, get_settings
from scribe.schemas.errors import ErrorResponse
from scribe.schemas.meta import HealthResponse, ReadyResponse, StatusResponse

router = APIRouter(prefix="/meta", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return await health_status()


@router.get(
    "/ready",
    response_model=ReadyResponse,
    responses={503: {"model": ErrorResponse, "description": "Service not ready."}},
)
async def ready(settings: Annotated[Settings, Depends(get_settings)]) -> ReadyResponse:
    return await readiness_status(settings)


@router.get("/status", response_model=StatusResponse)
async def status(settings: Annotated[Settings, Depends(get_settings)]) -> StatusResponse:
    return await status_snapshot(settings)
