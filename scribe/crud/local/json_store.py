"""
File-based database: one JSON array of records per collection.

``users.json`` and ``files.json`` live under ``DATA_DIR``. Records written by
the web app use camelCase (``userId``); reads normalize the owner field to
``user_id`` so callers see the same shape as the Supabase tables.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from scribe.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

# One lock per store file, shared by every collection object in the process.
_PATH_LOCKS: dict[Path, threading.Lock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(key)
        if lock is None:
            lock = _PATH_LOCKS[key] = threading.Lock()
        return lock


def _normalize_record(record: dict[str, Any]) -> dict[str, Any]:
    normalized = dict(record)
    if "userId" in normalized and "user_id" not in normalized:
        normalized["user_id"] = normalized["userId"]
    return normalized


class _JsonCollection:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = _lock_for(path)

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read store file", extra={"store_path": str(self.path)})
            raise ExternalServiceError(f"Failed to read {self.path.name}.") from exc

        if not isinstance(data, list):
            raise ExternalServiceError(f"{self.path.name} must contain a JSON array.")
        return [row for row in data if isinstance(row, dict)]

    def _write(self, rows: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=f"{self.path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            json.dump(rows, f, indent=2, ensure_ascii=False)
            temp_path = Path(f.name)
        try:
            os.replace(temp_path, self.path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            logger.error("Failed to write store file", extra={"store_path": str(self.path)})
            raise ExternalServiceError(f"Failed to write {self.path.name}.") from exc

    def all(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._read()

    def find_one(self, field: str, value: Any) -> dict[str, Any] | None:
        with self._lock:
            rows = self._read()
        for row in rows:
            if row.get(field) == value:
                return _normalize_record(row)
        return None

    def update(self, record_id: str, patch: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            rows = self._read()
            for index, row in enumerate(rows):
                if row.get("id") != record_id:
                    continue
                updated = {**row, **patch, "updatedAt": datetime.now(UTC).isoformat()}
                rows[index] = updated
                self._write(rows)
                return _normalize_record(updated)
        return None


class JsonUserStore:
    def __init__(self, data_dir: str | Path) -> None:
        self._users = _JsonCollection(Path(data_dir) / "users.json")

    async def find_by_email(self, email: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._users.find_one, "email", email)

    async def ping(self) -> None:
        await asyncio.to_thread(self._users.all)


class JsonFileStore:
    def __init__(self, data_dir: str | Path) -> None:
        self._files = _JsonCollection(Path(data_dir) / "files.json")

    async def find_by_id(self, file_id: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._files.find_one, "id", file_id)

    async def update(self, file_id: str, patch: dict[str, Any]) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._files.update, file_id, patch)
