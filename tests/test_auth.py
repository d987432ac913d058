from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import jwt
import pytest
from fastapi.testclient import TestClient
from supabase_auth.errors import AuthApiError
from support import JWT_SECRET, OWNER_EMAIL, FakeGemini, auth_headers, build_app, build_settings, make_token

from scribe.api.deps import auth
from scribe.core.config import Settings
from scribe.core.errors import AuthenticationError, ConfigurationError, ExternalServiceError


async def test_local_token_resolves_email(settings: Settings) -> None:
    assert await auth.verify_token(make_token(OWNER_EMAIL), settings) == OWNER_EMAIL


async def test_local_token_without_email_claim(settings: Settings) -> None:
    token = jwt.encode({"sub": "user-1"}, JWT_SECRET, algorithm="HS256")

    with pytest.raises(AuthenticationError, match="Invalid auth token"):
        await auth.verify_token(token, settings)


async def test_local_mode_requires_secret(data_dir: Path) -> None:
    settings = build_settings(data_dir, JWT_SECRET=None)

    with pytest.raises(ConfigurationError, match="JWT_SECRET"):
        await auth.verify_token(make_token(OWNER_EMAIL), settings)


async def test_audience_is_checked_when_configured(data_dir: Path) -> None:
    settings = build_settings(data_dir, JWT_AUDIENCE="scribe")

    with pytest.raises(AuthenticationError):
        await auth.verify_token(make_token(OWNER_EMAIL), settings)


def test_missing_secret_is_a_server_error(data_dir: Path, gemini: FakeGemini) -> None:
    client = TestClient(build_app(build_settings(data_dir, JWT_SECRET=None), gemini))

    response = client.post("/api/ai-settings/regenerate-summary", json={"fileId": "file-1"}, headers=auth_headers())

    assert response.status_code == 500
    assert response.json()["code"] == "configuration_error"


class _FakeAuth:
    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.tokens: list[str] = []

    async def get_user(self, jwt: str | None = None) -> Any:
        self.tokens.append(jwt or "")
        if self.error is not None:
            raise self.error
        return self.result


def _patch_remote(monkeypatch: pytest.MonkeyPatch, fake_auth: _FakeAuth) -> None:
    async def fake_client(_settings: Any, _token: str) -> Any:
        return SimpleNamespace(auth=fake_auth)

    monkeypatch.setattr(auth, "create_supabase_user_client", fake_client)


@pytest.mark.parametrize(
    "result",
    [
        SimpleNamespace(email=OWNER_EMAIL),
        SimpleNamespace(user=SimpleNamespace(email=OWNER_EMAIL)),
    ],
)
async def test_remote_mode_reads_email_from_supabase(
    monkeypatch: pytest.MonkeyPatch,
    data_dir: Path,
    result: Any,
) -> None:
    fake_auth = _FakeAuth(result=result)
    _patch_remote(monkeypatch, fake_auth)

    email = await auth.verify_token("remote-token", build_settings(data_dir, AUTH_MODE="remote"))

    assert email == OWNER_EMAIL
    assert fake_auth.tokens == ["remote-token"]


async def test_remote_mode_maps_auth_errors(monkeypatch: pytest.MonkeyPatch, data_dir: Path) -> None:
    _patch_remote(monkeypatch, _FakeAuth(error=AuthApiError("invalid JWT", 401, "bad_jwt")))

    with pytest.raises(AuthenticationError, match="Invalid or expired auth token"):
        await auth.verify_token("remote-token", build_settings(data_dir, AUTH_MODE="remote"))


async def test_remote_mode_wraps_unexpected_errors(monkeypatch: pytest.MonkeyPatch, data_dir: Path) -> None:
    _patch_remote(monkeypatch, _FakeAuth(error=OSError("network down")))

    with pytest.raises(ExternalServiceError, match="Failed to validate auth token"):
        await auth.verify_token("remote-token", build_settings(data_dir, AUTH_MODE="remote"))


async def test_remote_mode_rejects_user_without_email(monkeypatch: pytest.MonkeyPatch, data_dir: Path) -> None:
    _patch_remote(monkeypatch, _FakeAuth(result=SimpleNamespace(user=None)))

    with pytest.raises(AuthenticationError, match="Invalid auth token"):
        await auth.verify_token("remote-token", build_settings(data_dir, AUTH_MODE="remote"))


async def test_remote_mode_requires_supabase_settings(data_dir: Path) -> None:
    with pytest.raises(ConfigurationError, match="SUPABASE_URL"):
        await auth.verify_token("remote-token", build_settings(data_dir, AUTH_MODE="remote"))
