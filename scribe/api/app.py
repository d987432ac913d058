from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from scribe.api import __version__
from scribe.api.routers import files_router, meta_router
from scribe.core.config import Settings, get_settings
from scribe.core.errors import AppError
from scribe.core.handlers import (
    handle_app_error,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from scribe.core.lifespan import lifespan
from scribe.core.logging import setup_logging
from scribe.core.middleware import log_requests


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Application factory for creating FastAPI instances.

    Args:
        settings: Optional settings override. If None, loads from environment.
                  Useful for testing with custom configuration.
    """
    if settings is None:
        settings = get_settings()

    middleware: list[Middleware] = []
    if settings.cors_allow_origins:
        middleware.append(
            Middleware(
                CORSMiddleware,
                allow_origins=settings.cors_allow_origins,
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            )
        )

    app = FastAPI(
        title="Scribe",
        description="Transcription and AI summary service",
        version=__version__,
        middleware=middleware,
        lifespan=lifespan,
    )
    app.include_router(meta_router)
    app.include_router(files_router)
    app.state.settings = settings
    app.state.rate_limit = settings.rate_limit
    app.state.http_client = None

    app.add_middleware(BaseHTTPMiddleware, dispatch=log_requests)
    app.add_exception_handler(AppError, handle_app_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Route dependencies read the same settings the app was built with.
    app.dependency_overrides[get_settings] = lambda: settings

    return app


# Initialize logging once at module load
setup_logging()

# Default app instance for uvicorn (uvicorn scribe.api.app:app)
app = create_app()
