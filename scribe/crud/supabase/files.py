"""Supabase files CRUD."""

from __future__ import annotations

from typing import Any

from postgrest import APIError

from scribe.services.supabase.helpers import first_row, raise_for_postgrest_error
from supabase import AsyncClient

FILE_COLUMNS = "id,user_id,transcript,summary,topic"


async def fetch_file(client: AsyncClient, file_id: str) -> dict[str, Any] | None:
    """Fetch a file by ID, or None when it does not exist."""
    try:
        response = await client.table("files").select(FILE_COLUMNS).eq("id", file_id).limit(1).execute()
    except APIError as exc:
        raise_for_postgrest_error(exc, "Failed to fetch file.")

    data = response.data or []
    if not data:
        return None

    return first_row(data, error_message="Supabase returned an unexpected files shape.")


async def update_file(client: AsyncClient, file_id: str, patch: dict[str, Any]) -> dict[str, Any] | None:
    """Apply ``patch`` to a file and return the updated row, or None when nothing was updated."""
    try:
        response = await client.table("files").update(patch).eq("id", file_id).execute()
    except APIError as exc:
        raise_for_postgrest_error(exc, "Failed to update file.")

    data = response.data or []
    if not data:
        return None

    return first_row(data, error_message="Supabase returned an unexpected files shape.")
