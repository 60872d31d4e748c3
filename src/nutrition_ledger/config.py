"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    telegram_bot_token: str | None = None
    telegram_chat_id: int | None = None
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    state_file: str = "ledger_state.json"
    timezone: str = "UTC"
    day_rollover: str = "midnight"
    idle_reminder_hours: float = 4.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        """Return True when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_service_key)
