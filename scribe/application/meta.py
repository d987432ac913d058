from __future__ import annotations

import logging
import time

from scribe import __version__
from scribe.core.config import Settings
from scribe.core.errors import AppError, NotReadyError
from scribe.crud.stores import build_stores
from scribe.schemas.meta import HealthResponse, ReadyResponse, StatusResponse

_START_TIME = time.monotonic()

logger = logging.getLogger(__name__)


async def health_status() -> HealthResponse:
    return HealthResponse(status="ok")


async def readiness_status(settings: Settings) -> ReadyResponse:
    if not settings.gemini_api_key:
        logger.warning("readiness check failed: GEMINI_API_KEY not configured")
        raise NotReadyError("AI service is not configured.")

    # Lightweight read to ensure the store backend is reachable.
    try:
        stores = await build_stores(settings)
        await stores.users.ping()
    except AppError as exc:
        logger.warning(
            "readiness check failed: store not reachable",
            extra={"store_backend": settings.store_backend, "error_type": type(exc).__name__},
        )
        raise NotReadyError("Store is not reachable.") from exc

    logger.info("readiness check ok")
    return ReadyResponse(status="ok", store_backend=settings.store_backend, summarizer_configured=True)


async def status_snapshot(settings: Settings) -> StatusResponse:
    uptime_seconds = time.monotonic() - _START_TIME
    return StatusResponse(
        status="ok",
        environment=settings.app_env,
        version=__version__,
        uptime_seconds=uptime_seconds,
    )
