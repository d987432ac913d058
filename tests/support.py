"""Shared test data and helpers."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import httpx
import jwt
from fastapi import FastAPI

from scribe.api.app import create_app
from scribe.core.config import Settings

JWT_SECRET = "test-jwt-secret"
GEMINI_KEY = "test-gemini-key"

OWNER_EMAIL = "owner@example.com"
OTHER_EMAIL = "other@example.com"

GOOD_SUMMARY = "This is a test summary that is long enough."
GOOD_REPLY = f"SUMMARY: {GOOD_SUMMARY}\nTOPICS: a, b"

USERS = [
    {"id": "user-1", "email": OWNER_EMAIL, "name": "Owner"},
    {"id": "user-2", "email": OTHER_EMAIL, "name": "Other"},
]

FILES = [
    {
        "id": "file-1",
        "userId": "user-1",
        "transcript": "Speaker one walks through the quarterly roadmap and hiring plan.",
        "summary": None,
        "topic": "Planning",
    },
    {
        "id": "file-2",
        "userId": "user-2",
        "transcript": "A different user's meeting about budgets.",
        "summary": "Old summary.",
        "topic": None,
    },
    {"id": "file-3", "userId": "user-1", "transcript": "   ", "summary": None, "topic": None},
    {"id": "file-4", "userId": "user-1", "transcript": "Short standup notes.", "summary": None, "topic": None},
]


def gemini_payload(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class FakeGemini:
    """Records generateContent calls and replies with a configurable response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.reply_text = GOOD_REPLY
        self.body: Any = None
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(self.status_code, text=self.body or "upstream said no")
        return httpx.Response(200, json=self.body if self.body is not None else gemini_payload(self.reply_text))

    @property
    def prompts(self) -> list[str]:
        return [json.loads(request.content)["contents"][0]["parts"][0]["text"] for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def make_token(email: str, *, secret: str = JWT_SECRET, expires_in: timedelta = timedelta(hours=1)) -> str:
    now = datetime.now(UTC)
    return jwt.encode({"email": email, "iat": now, "exp": now + expires_in}, secret, algorithm="HS256")


def auth_headers(email: str = OWNER_EMAIL) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(email)}"}


def read_files(data_dir: Path) -> dict[str, dict[str, Any]]:
    rows = json.loads((data_dir / "files.json").read_text(encoding="utf-8"))
    return {row["id"]: row for row in rows}


def build_settings(data_dir: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "GEMINI_API_KEY": GEMINI_KEY,
        "JWT_SECRET": JWT_SECRET,
        "AUTH_MODE": "local",
        "STORE_BACKEND": "local",
        "DATA_DIR": str(data_dir),
        "APP_ENV": "test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def build_app(settings: Settings, gemini: FakeGemini) -> FastAPI:
    app = create_app(settings)
    app.state.http_client = gemini.client()
    return app
