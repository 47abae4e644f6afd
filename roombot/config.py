# roombot/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
Derived paths (bot store, Matrix store) default to locations inside
BOT_DATA_DIR when not set explicitly.
"""

import logging
import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_REQUIRED_FIELDS = (
    "matrix_homeserver_url",
    "matrix_access_token",
    "matrix_user_id",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # Matrix account
    matrix_homeserver_url: str = ""
    matrix_access_token: str = ""
    matrix_user_id: str = ""
    matrix_device_id: str = ""
    matrix_store_path: str = ""
    matrix_encryption: bool = False

    # Bot behaviour
    bot_prefix: str = "!"
    bot_data_dir: str = "./data"
    bot_store_path: str = ""
    bot_info_url: str = "https://matrix.org"

    # Logging
    bot_log_level: str = "info"
    bot_log_json: bool = True

    # Observability
    logfire_token: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
        case_sensitive=False,  # Allow case-insensitive env var names
    )

    @field_validator("bot_log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().lower()
        return normalized if normalized in _LOG_LEVELS else "info"

    @property
    def log_level(self) -> int:
        """Get the configured level as a ``logging`` constant.

        Returns:
            Logging level integer (e.g. ``logging.INFO``).
        """
        return _LOG_LEVELS[self.bot_log_level]

    @property
    def resolved_store_path(self) -> str:
        """Path of the JSON document backing command state."""
        return self.bot_store_path or os.path.join(self.bot_data_dir, "bot-store.json")

    @property
    def resolved_matrix_store_path(self) -> str:
        """Directory holding the Matrix client's sync and crypto state."""
        return self.matrix_store_path or os.path.join(
            self.bot_data_dir, "matrix-store"
        )

    def missing_required(self) -> list[str]:
        """List required settings that are empty.

        Returns:
            Environment variable names (upper case) of missing settings.
        """
        return [name.upper() for name in _REQUIRED_FIELDS if not getattr(self, name)]


# Singleton instance - import this in your code
settings = Settings()
