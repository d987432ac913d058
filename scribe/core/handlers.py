from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scribe.core.errors import AppError, MethodNotAllowedError, NotFoundError
from scribe.core.logging import log_context

logger = logging.getLogger(__name__)


def _error_body(message: str, code: str, details: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message, "code": code}
    if details:
        body["details"] = details
    return body


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    request.state.error_code = exc.code
    # Log only server-side failures here. Client errors should be logged at the source.
    if exc.status_code >= 500:
        with log_context(request_id=request_id, method=request.method, path=request.url.path):
            logger.error(
                "%s",
                exc.detail,
                extra={
                    "error_code": exc.code,
                    "status_code": exc.status_code,
                    "error_type": type(exc).__name__,
                    "details": exc.details,
                },
            )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, exc.code, exc.details),
    )


async def handle_validation_error(request: Request, _exc: RequestValidationError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    request.state.error_code = "invalid_request"
    with log_context(request_id=request_id, method=request.method, path=request.url.path):
        logger.warning("Invalid request", extra={"error_code": "invalid_request", "status_code": 400})
    return JSONResponse(status_code=400, content=_error_body("Invalid request", "invalid_request"))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) in the app's error shape."""
    error: AppError
    if exc.status_code == 405:
        error = MethodNotAllowedError("Method not allowed.")
    elif exc.status_code == 404:
        error = NotFoundError("Not found.")
    else:
        error = AppError(str(exc.detail))
        error.status_code = exc.status_code
        error.code = "http_error"

    response = await handle_app_error(request, error)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    with log_context(request_id=request_id, method=request.method, path=request.url.path):
        logger.exception("Unhandled error", extra={"error_type": type(exc).__name__})
    # ServerErrorMiddleware renders this response outside log_requests.
    headers = {"X-Request-Id": request_id} if request_id else None
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error.", "internal_error"),
        headers=headers,
    )
