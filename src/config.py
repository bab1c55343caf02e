"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Bot configuration. All values come from environment variables."""

    # Telegram
    telegram_bot_token: str = Field(default="")

    # Persistence
    data_store_path: Path = Field(default=Path("data/reminders.json"))

    # Scheduler
    scheduler_timezone: str = Field(default="UTC")

    # Validation limits
    max_body_length: int = Field(default=1800)
    max_attachments: int = Field(default=10)

    # Delivery
    default_delivery_channel: str = Field(default="telegram")
    delivery_timeout_seconds: float = Field(default=30.0)

    # Interactive /messages list
    session_timeout_seconds: float = Field(default=3600.0)

    # Presentation
    help_url: str = Field(default="")

    # Command audit log (chat that receives a notice for every command used)
    audit_chat_id: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_audit_chat_id(self) -> int | None:
        """Parse AUDIT_CHAT_ID into an int, or None when unset."""
        value = self.audit_chat_id.strip()
        if not value:
            return None
        return int(value)


settings = Settings()
