"""File-based JSON stores."""

from scribe.crud.local.json_store import JsonFileStore, JsonUserStore

__all__ = ["JsonFileStore", "JsonUserStore"]
