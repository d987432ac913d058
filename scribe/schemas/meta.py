from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str


class ReadyResponse(BaseModel):
    status: str
    store_backend: str
    summarizer_configured: bool


class StatusResponse(BaseModel):
    status: str
    environment: str
    version: str | None = None
    uptime_seconds: float | None = None
