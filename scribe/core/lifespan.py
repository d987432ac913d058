from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the shared outbound HTTP client for the lifetime of the app."""
    owned_client: httpx.AsyncClient | None = None

    if getattr(app.state, "http_client", None) is None:
        timeout = app.state.settings.gemini_timeout_seconds
        owned_client = httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        app.state.http_client = owned_client
        logger.info("outbound http client started", extra={"timeout_seconds": timeout})

    try:
        yield
    finally:
        if owned_client is not None:
            await owned_client.aclose()
            app.state.http_client = None
            logger.info("outbound http client closed")
