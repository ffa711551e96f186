"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    openai_web_search: bool = True
    store_backend: str = "file"
    data_dir: Path = Path(".data")
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    store_key_prefix: str = "diet_pro"
    default_timezone: str = "UTC"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_store_backend(raw: str | None) -> str:
    """Normalize the configured store backend name."""
    if raw is None:
        return "file"
    cleaned = raw.strip().lower()
    if cleaned in {"supabase", "remote"}:
        return "supabase"
    return "file"
