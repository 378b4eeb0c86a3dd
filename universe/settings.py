from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import dotenv_values
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


def _load_env() -> None:
    """
    Load configuration files into the process environment.

    Priority: variables already set in the OS win, then ``ENV-<ENV>``
    (prod/test/dev), then the shared ``.env``. Nothing is read from disk when
    ``SKIP_DOTENV`` is set.
    """
    if (os.getenv("SKIP_DOTENV") or "").lower() in {"1", "true", "yes"}:
        return
    common_path = BASE_DIR / ".env"
    base_vals = dotenv_values(common_path) if common_path.exists() else {}

    prefer = os.getenv("ENV", base_vals.get("ENV", "dev")).lower()
    env_file = {
        "prod": BASE_DIR / "ENV-PROD",
        "test": BASE_DIR / "ENV-TEST",
    }.get(prefer, BASE_DIR / "ENV-DEV")
    env_vals = dotenv_values(env_file) if env_file.exists() else {}

    merged = {**base_vals, **env_vals}
    if "ENV" not in merged:
        merged["ENV"] = prefer

    for key, value in merged.items():
        if key in os.environ:
            continue
        if value is None:
            continue
        os.environ[key] = str(value)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="UNITCONVERT_",
        env_file=None,  # .env is handled by _load_env()
        extra="ignore",
        populate_by_name=True,
    )

    env: str = Field(default="dev", validation_alias="ENV")
    app_name: str = "Unit Converter Hub"
    app_version: str = "1.0.0"

    log_level: str = "INFO"
    log_json: bool = True

    # CSV list of allowed origins
    cors_origins: str = "*"

    # request limits; 0 disables the check
    max_body_bytes: int = 1_000_000
    request_timeout_seconds: float = 15.0

    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window_seconds: float = 15 * 60.0
    # key clients on X-Forwarded-For; enable only behind a trusted proxy
    rate_limit_trust_forwarded: bool = False

    batch_max_conversions: int = 100
    search_default_limit: int = 10

    @field_validator("env", mode="before")
    @classmethod
    def _normalize_env(cls, v):
        return str(v or "dev").strip().lower()

    @property
    def cors_origin_list(self) -> List[str]:
        return [part.strip() for part in self.cors_origins.split(",") if part.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Public factory used across the application."""
    _load_env()
    return Settings()


__all__ = ["Settings", "get_settings"]
