"""Helpers for Supabase error handling and response parsing."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, NoReturn

from postgrest import APIError
from supabase_auth.errors import AuthApiError

from scribe.core.errors import (
    AuthenticationError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
)

# https://supabase.com/docs/guides/auth/debugging/error-codes
AUTH_RATE_LIMIT_CODES = frozenset({"over_request_rate_limit"})
AUTH_FORBIDDEN_CODES = frozenset({"user_banned"})

# https://docs.postgrest.org/en/v12/references/errors.html
# PGRST301/302 are JWT failures; 42501 is a PostgreSQL RLS denial.
POSTGREST_AUTH_CODES = frozenset({"PGRST301", "PGRST302"})
POSTGREST_FORBIDDEN_CODES = frozenset({"42501"})


def raise_for_auth_error(exc: AuthApiError, fallback_message: str) -> NoReturn:
    """Convert AuthApiError to the appropriate AppError subclass and raise."""
    code = getattr(exc, "code", None) or ""

    if code in AUTH_RATE_LIMIT_CODES:
        raise RateLimitError("Auth rate limit exceeded.") from exc
    if code in AUTH_FORBIDDEN_CODES:
        raise ForbiddenError("User access is forbidden.") from exc

    raise AuthenticationError(fallback_message) from exc


def raise_for_postgrest_error(exc: APIError, fallback_message: str) -> NoReturn:
    """Convert PostgREST APIError to the appropriate AppError subclass and raise."""
    code = getattr(exc, "code", None) or ""

    if code in POSTGREST_AUTH_CODES:
        raise AuthenticationError("Database authentication failed.") from exc
    if code in POSTGREST_FORBIDDEN_CODES:
        raise ForbiddenError("Access denied to database resource.") from exc

    raise ExternalServiceError(fallback_message) from exc


def first_row(
    value: Any,
    *,
    error_message: str,
    not_found_message: str | None = None,
) -> dict[str, Any]:
    """
    Extract the first row from a Supabase response.

    Raises:
        ExternalServiceError: If the response structure is malformed.
        NotFoundError: If the result is empty and not_found_message is provided.
    """
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise ExternalServiceError(error_message)

    if not value:
        if not_found_message is not None:
            raise NotFoundError(not_found_message)
        raise ExternalServiceError(error_message)

    row = value[0]
    if not isinstance(row, Mapping):
        raise ExternalServiceError(error_message)

    return dict(row)
