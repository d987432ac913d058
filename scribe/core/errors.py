from __future__ import annotations


class AppError(Exception):
    """Base class for all application errors."""

    status_code = 500
    code = "internal_error"

    def __init__(self, detail: str, *, details: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.details = details


class InvalidRequestError(AppError):
    """Client sent a malformed or invalid request (400)."""

    status_code = 400
    code = "invalid_request"


class AuthenticationError(AppError):
    """Client is not authenticated or token is invalid/expired (401)."""

    status_code = 401
    code = "unauthorized"


class ForbiddenError(AppError):
    """Client is authenticated but lacks permission to access the resource (403)."""

    status_code = 403
    code = "forbidden"


class NotFoundError(AppError):
    """Requested resource does not exist (404)."""

    status_code = 404
    code = "not_found"


class MethodNotAllowedError(AppError):
    """HTTP method is not supported by the route (405)."""

    status_code = 405
    code = "method_not_allowed"


class RequestTooLargeError(AppError):
    """Request body exceeds the allowed size (413)."""

    status_code = 413
    code = "request_too_large"


class RateLimitError(AppError):
    """Client has exceeded rate limits (429)."""

    status_code = 429
    code = "rate_limit_exceeded"


class ConfigurationError(AppError):
    """Server misconfiguration (500)."""

    status_code = 500
    code = "configuration_error"


class PersistenceError(AppError):
    """A store write did not return the updated record (500)."""

    status_code = 500
    code = "persistence_error"


class SummaryGenerationError(AppError):
    """Summary generation failed or produced an unusable result (500)."""

    status_code = 500
    code = "summary_generation_failed"


class ExternalServiceError(AppError):
    """Upstream service failed or returned an invalid response (502)."""

    status_code = 502
    code = "external_service_error"


class NotReadyError(AppError):
    """Service is temporarily unavailable (503)."""

    status_code = 503
    code = "not_ready"
