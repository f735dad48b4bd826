from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    # Local dev: load from .env automatically.
    # In production: you typically inject real env vars instead.
    model_config = SettingsConfigDict(env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8")

    # Env vars:
    # - HOST (bind address for `python -m app`)
    # - PORT
    # - LOG_LEVEL (CRITICAL, ERROR, WARNING, INFO or DEBUG; case-insensitive)
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8080, validation_alias="PORT")
    log_level: LogLevel = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v):
        # Uvicorn only accepts these names, lower-cased.
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v


def get_settings() -> Settings:
    """Load settings from environment.

    Keep this as the single canonical constructor for Settings(). FastAPI
    dependencies and tests can override/monkeypatch this function.
    """
    return Settings()
