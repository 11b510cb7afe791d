"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

SQLITE_BACKEND = "sqlite"
SUPABASE_BACKEND = "supabase"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: str = SQLITE_BACKEND
    sqlite_path: str = "simple_calorie.db"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    timezone: str = "UTC"
    log_level: str = "INFO"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 1000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
