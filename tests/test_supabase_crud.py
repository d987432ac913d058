from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import httpx
import pytest
from postgrest import APIError

from scribe.core.errors import ExternalServiceError, ForbiddenError
from scribe.crud.stores import SupabaseFileStore, SupabaseUserStore


class _FakeQuery:
    """Minimal stand-in for the PostgREST query builder."""

    def __init__(self, table: _FakeTable) -> None:
        self.table = table
        self.filters: list[tuple[str, Any]] = []
        self.patch: dict[str, Any] | None = None

    def select(self, columns: str) -> _FakeQuery:
        self.table.selected = columns
        return self

    def update(self, patch: dict[str, Any]) -> _FakeQuery:
        self.patch = patch
        return self

    def eq(self, column: str, value: Any) -> _FakeQuery:
        self.filters.append((column, value))
        return self

    def limit(self, _count: int) -> _FakeQuery:
        return self

    async def execute(self) -> Any:
        self.table.queries.append(self)
        if self.table.error is not None:
            raise self.table.error
        rows = [row for row in self.table.rows if all(row.get(col) == val for col, val in self.filters)]
        if self.patch is not None:
            rows = [{**row, **self.patch} for row in rows]
        return SimpleNamespace(data=rows)


class _FakeTable:
    def __init__(self, rows: list[dict[str, Any]], error: Exception | None = None) -> None:
        self.rows = rows
        self.error = error
        self.selected: str | None = None
        self.queries: list[_FakeQuery] = []


class _FakeClient:
    def __init__(self, **tables: _FakeTable) -> None:
        self.tables = tables

    def table(self, name: str) -> _FakeQuery:
        return _FakeQuery(self.tables[name])


FILE_ROW = {"id": "file-1", "user_id": "user-1", "transcript": "hello", "summary": None, "topic": None}


async def test_user_lookup_by_email() -> None:
    users = _FakeTable([{"id": "user-1", "email": "owner@example.com"}])
    store = SupabaseUserStore(_FakeClient(users=users))  # type: ignore[arg-type]

    assert await store.find_by_email("owner@example.com") == {"id": "user-1", "email": "owner@example.com"}
    assert await store.find_by_email("nobody@example.com") is None
    assert users.selected == "id,email"


async def test_file_fetch_and_update() -> None:
    files = _FakeTable([dict(FILE_ROW)])
    store = SupabaseFileStore(_FakeClient(files=files))  # type: ignore[arg-type]

    assert await store.find_by_id("file-1") == FILE_ROW
    assert await store.find_by_id("missing") is None

    updated = await store.update("file-1", {"summary": "new", "topic": "General"})

    assert updated is not None
    assert updated["summary"] == "new"
    assert files.queries[-1].filters == [("id", "file-1")]
    assert await store.update("missing", {"summary": "new"}) is None


@pytest.mark.parametrize(
    ("code", "error_type"),
    [("42501", ForbiddenError), ("XX000", ExternalServiceError)],
)
async def test_postgrest_errors_are_mapped(code: str, error_type: type[Exception]) -> None:
    error = APIError({"message": "boom", "code": code, "hint": None, "details": None})
    store = SupabaseFileStore(_FakeClient(files=_FakeTable([], error=error)))  # type: ignore[arg-type]

    with pytest.raises(error_type):
        await store.find_by_id("file-1")


async def test_ping_reads_users_table() -> None:
    users = _FakeTable([{"id": "user-1", "email": "owner@example.com"}])

    await SupabaseUserStore(_FakeClient(users=users)).ping()  # type: ignore[arg-type]

    assert users.selected == "id"


@pytest.mark.parametrize(
    "error",
    [
        APIError({"message": "boom", "code": "XX000", "hint": None, "details": None}),
        httpx.ConnectError("connection refused"),
    ],
)
async def test_ping_maps_unreachable_backend(error: Exception) -> None:
    store = SupabaseUserStore(_FakeClient(users=_FakeTable([], error=error)))  # type: ignore[arg-type]

    with pytest.raises(ExternalServiceError, match="Failed to reach Supabase"):
        await store.ping()
