"""Supabase users CRUD."""

from __future__ import annotations

from typing import Any

from postgrest import APIError

from scribe.services.supabase.helpers import first_row, raise_for_postgrest_error
from supabase import AsyncClient


async def fetch_user_by_email(client: AsyncClient, email: str) -> dict[str, Any] | None:
    try:
        response = await client.table("users").select("id,email").eq("email", email).limit(1).execute()
    except APIError as exc:
        raise_for_postgrest_error(exc, "Failed to fetch user.")

    data = response.data or []
    if not data:
        return None

    return first_row(data, error_message="Supabase returned an unexpected users shape.")
