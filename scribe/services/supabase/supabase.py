"""Supabase client factories."""

from __future__ import annotations

from scribe.core.config import Settings
from scribe.core.errors import ConfigurationError
from supabase import AsyncClient, AsyncClientOptions, create_async_client


def _normalize_supabase_url(url: str) -> str:
    """Ensure the Supabase URL has a trailing slash (required by storage client)."""
    return url.rstrip("/") + "/"


def _not_configured(client_kind: str, **values: str | None) -> ConfigurationError:
    missing_str = ", ".join(name for name, value in values.items() if not value)
    return ConfigurationError(f"Supabase {client_kind} client is not configured. Missing {missing_str}.")


async def create_supabase_admin_client(settings: Settings) -> AsyncClient:
    """Create a Supabase client with admin (service role) credentials."""
    url = settings.supabase_url
    key = settings.supabase_secret_key
    if not url or not key:
        raise _not_configured("admin", SUPABASE_URL=url, SUPABASE_SECRET_KEY=key)

    return await create_async_client(_normalize_supabase_url(url), key)


async def create_supabase_user_client(settings: Settings, access_token: str) -> AsyncClient:
    """Create a Supabase client scoped to a user's JWT."""
    url = settings.supabase_url
    key = settings.supabase_publishable_key
    if not url or not key:
        raise _not_configured("user", SUPABASE_URL=url, SUPABASE_PUBLISHABLE_KEY=key)

    options = AsyncClientOptions(
        headers={
            "Authorization": f"Bearer {access_token}",
        },
        persist_session=False,
    )
    return await create_async_client(_normalize_supabase_url(url), key, options)
