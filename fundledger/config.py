"""Application configuration from environment variables."""

import logging
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pydantic automatically loads values from:
    1. OS environment variables (at instantiation time)
    2. .env file (if present)
    """

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./fundledger.db",
        description="SQLAlchemy database URL (async driver)",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Server log file")

    # Notifications
    base_url: str = Field(
        default="http://localhost:8000", description="Public URL used in e-mail links"
    )
    email_from_domain: str = Field(
        default="example.org", description="Domain of the no-reply sender address"
    )
    aws_region: str = Field(default="us-east-1", description="Region of the SES client")
    notifications_enabled: bool = Field(
        default=True, description="Send reimbursement status e-mails"
    )

    # API
    api_title: str = Field(default="Fund Ledger API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")


# Lazy loader so the .env file is read after the entry point loads it
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
        logger.debug("Settings loaded (database_url=%s)", _settings_instance.database_url)
    return _settings_instance


__all__ = ["Settings", "get_settings"]
