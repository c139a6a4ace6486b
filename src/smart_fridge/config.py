"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    telegram_bot_token: str
    telegram_chat_id: int
    session_file: Path = Path.home() / ".smart_fridge" / "session.json"
    expiry_threshold_days: int = 3
    scan_interval_hours: int = 24
    scan_initial_delay_minutes: int = 60
    min_battery_percent: int = 15
    constraint_retry_minutes: int = 30
    job_store_url: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
