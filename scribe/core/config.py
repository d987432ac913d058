"""Application settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration loaded from environment variables.

    Only secrets and deployment-specific values belong here.
    Application constants live in their respective modules.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # Gemini (the key gates the summary feature)
    # ---------------------------------------------------------------------------
    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-1.5-flash", validation_alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1",
        validation_alias="GEMINI_BASE_URL",
    )
    gemini_timeout_seconds: float = Field(default=60.0, validation_alias="GEMINI_TIMEOUT_SECONDS")

    # ---------------------------------------------------------------------------
    # Auth
    # ---------------------------------------------------------------------------
    auth_mode: Literal["local", "remote"] = Field(default="local", validation_alias="AUTH_MODE")
    jwt_secret: str | None = Field(default=None, validation_alias="JWT_SECRET")
    jwt_audience: str | None = Field(default=None, validation_alias="JWT_AUDIENCE")

    # ---------------------------------------------------------------------------
    # Storage
    # ---------------------------------------------------------------------------
    store_backend: Literal["local", "supabase"] = Field(default="local", validation_alias="STORE_BACKEND")
    data_dir: str = Field(default="./data", validation_alias="DATA_DIR")
    supabase_url: str | None = Field(default=None, validation_alias="SUPABASE_URL")
    supabase_publishable_key: str | None = Field(default=None, validation_alias="SUPABASE_PUBLISHABLE_KEY")
    supabase_secret_key: str | None = Field(default=None, validation_alias="SUPABASE_SECRET_KEY")

    # ---------------------------------------------------------------------------
    # Environment config (optional)
    # ---------------------------------------------------------------------------
    app_env: str = Field(default="local", validation_alias="APP_ENV")

    # ---------------------------------------------------------------------------
    # Deployment config (optional)
    # ---------------------------------------------------------------------------
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias="CORS_ALLOW_ORIGINS",
    )
    rate_limit: int = Field(default=0, validation_alias="RATE_LIMIT")  # requests/min, 0 = disabled

    @field_validator("gemini_model", "gemini_base_url", "data_dir", "app_env", mode="before")
    @classmethod
    def _strip_strings(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator(
        "gemini_api_key",
        "jwt_secret",
        "jwt_audience",
        "supabase_url",
        "supabase_publishable_key",
        "supabase_secret_key",
        mode="before",
    )
    @classmethod
    def _strip_optional(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("auth_mode", "store_backend", mode="before")
    @classmethod
    def _lower_choice(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _parse_list(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            items = [item.strip() for item in value.split(",")]
            return [item for item in items if item]
        return value

    @field_validator("gemini_timeout_seconds")
    @classmethod
    def _clamp_timeout(cls, value: float) -> float:
        return max(1.0, value)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
