"""User and file store interfaces and backend selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from postgrest import APIError

from scribe.core.config import Settings
from scribe.core.errors import ExternalServiceError
from scribe.crud.local import JsonFileStore, JsonUserStore
from scribe.crud.supabase.files import fetch_file, update_file
from scribe.crud.supabase.users import fetch_user_by_email
from scribe.services.supabase import create_supabase_admin_client
from scribe.services.supabase.helpers import raise_for_postgrest_error
from supabase import AsyncClient


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> dict[str, Any] | None: ...

    async def ping(self) -> None: ...


class FileStore(Protocol):
    async def find_by_id(self, file_id: str) -> dict[str, Any] | None: ...

    async def update(self, file_id: str, patch: dict[str, Any]) -> dict[str, Any] | None: ...


class SupabaseUserStore:
    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def find_by_email(self, email: str) -> dict[str, Any] | None:
        return await fetch_user_by_email(self._client, email)

    async def ping(self) -> None:
        try:
            await self._client.table("users").select("id").limit(1).execute()
        except APIError as exc:
            raise_for_postgrest_error(exc, "Failed to reach Supabase.")
        except httpx.HTTPError as exc:
            raise ExternalServiceError("Failed to reach Supabase.") from exc


class SupabaseFileStore:
    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def find_by_id(self, file_id: str) -> dict[str, Any] | None:
        return await fetch_file(self._client, file_id)

    async def update(self, file_id: str, patch: dict[str, Any]) -> dict[str, Any] | None:
        return await update_file(self._client, file_id, patch)


@dataclass(frozen=True)
class Stores:
    users: UserStore
    files: FileStore


async def build_stores(settings: Settings) -> Stores:
    if settings.store_backend == "supabase":
        client = await create_supabase_admin_client(settings)
        return Stores(users=SupabaseUserStore(client), files=SupabaseFileStore(client))

    return Stores(users=JsonUserStore(settings.data_dir), files=JsonFileStore(settings.data_dir))
