from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import ExpiredSignatureError, InvalidTokenError
from jwt import decode as jwt_decode
from supabase_auth.errors import AuthApiError

from scribe.api.deps.services import get_stores
from scribe.core.config import Settings, get_settings
from scribe.core.errors import AppError, AuthenticationError, ConfigurationError, ExternalServiceError
from scribe.core.logging import log_context
from scribe.crud.stores import Stores
from scribe.services.supabase import create_supabase_user_client, raise_for_auth_error

security = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    access_token: str
    email: str
    user_id: str


def _extract_email(user: Any) -> str | None:
    """
    Extract the email from a Supabase auth response.

    Supabase SDK returns either a User object directly or a UserResponse wrapper
    depending on the SDK version and method used. This handles both cases.
    """
    if getattr(user, "email", None):
        return str(user.email)
    inner = getattr(user, "user", None)
    if inner is not None and getattr(inner, "email", None):
        return str(inner.email)
    return None


def _decode_local_jwt(access_token: str, settings: Settings) -> str:
    if not settings.jwt_secret:
        raise ConfigurationError("JWT_SECRET is required when AUTH_MODE=local.")

    decode_kwargs: dict[str, Any] = {
        "key": settings.jwt_secret,
        "algorithms": ["HS256"],
        "options": {"verify_aud": bool(settings.jwt_audience)},
    }
    if settings.jwt_audience:
        decode_kwargs["audience"] = settings.jwt_audience
    try:
        claims = jwt_decode(access_token, **decode_kwargs)
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Auth token expired.") from exc
    except InvalidTokenError as exc:
        raise AuthenticationError("Invalid auth token.") from exc

    email = claims.get("email")
    if not isinstance(email, str) or not email:
        raise AuthenticationError("Invalid auth token.")
    return email


async def _verify_remote_token(access_token: str, settings: Settings) -> str:
    try:
        supabase = await create_supabase_user_client(settings, access_token)
        user = await supabase.auth.get_user(jwt=access_token)
    except AuthApiError as exc:
        logger.warning(
            "Supabase auth.get_user failed.",
            extra={"error_code": "unauthorized", "auth_error_code": getattr(exc, "code", "") or "unknown"},
        )
        raise_for_auth_error(exc, "Invalid or expired auth token.")
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error while validating auth token.")
        raise ExternalServiceError("Failed to validate auth token.") from exc

    email = _extract_email(user)
    if not email:
        logger.warning("Supabase returned no email for token.", extra={"error_code": "unauthorized"})
        raise AuthenticationError("Invalid auth token.")
    return email


async def verify_token(access_token: str, settings: Settings) -> str:
    """Verify ``access_token`` and return the email it was issued for."""
    if settings.auth_mode == "remote":
        return await _verify_remote_token(access_token, settings)
    return _decode_local_jwt(access_token, settings)


async def get_auth_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> AuthContext:
    request_id = getattr(request.state, "request_id", None)
    with log_context(request_id=request_id, method=request.method, path=request.url.path):
        if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
            logger.warning("Missing or invalid Authorization header.", extra={"error_code": "unauthorized"})
            raise AuthenticationError("Missing or invalid Authorization header.")

        access_token = credentials.credentials
        try:
            email = await verify_token(access_token, settings)
        except AuthenticationError as exc:
            logger.warning("Token verification failed.", extra={"error_code": exc.code, "reason": exc.detail})
            raise

        user = await stores.users.find_by_email(email)
        if not user or not user.get("id"):
            logger.warning("No user for verified token.", extra={"error_code": "unauthorized"})
            raise AuthenticationError("User not found.")

        return AuthContext(access_token=access_token, email=email, user_id=str(user["id"]))
