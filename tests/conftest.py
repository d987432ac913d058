from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from support import FILES, USERS, FakeGemini, build_app, build_settings

from scribe.core.config import Settings


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    (tmp_path / "users.json").write_text(json.dumps(USERS), encoding="utf-8")
    (tmp_path / "files.json").write_text(json.dumps(FILES), encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return build_settings(data_dir)


@pytest.fixture
def gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def app(settings: Settings, gemini: FakeGemini) -> FastAPI:
    return build_app(settings, gemini)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
