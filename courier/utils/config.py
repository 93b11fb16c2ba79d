"""
Configuration management for CSV Courier.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from courier.models.schemas import RemoteDestination


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Source directory watched for incoming CSV files
    source_dir: Path

    # Remote destination
    dest_user: str
    dest_host: str
    dest_dir: str

    # Directory of <table>_template files
    template_dir: Path
    skip_bad_templates: bool = False

    # Watcher Configuration
    poll_interval: float = Field(default=2.0, gt=0)  # seconds
    use_polling: bool = True

    # Transfer Configuration
    rsync_binary: str = "rsync"
    transfer_timeout: Optional[float] = Field(default=None, gt=0)  # seconds

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def destination(self) -> RemoteDestination:
        """Remote user, host and base directory for uploads."""
        return RemoteDestination(
            user=self.dest_user,
            host=self.dest_host,
            base_dir=self.dest_dir,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
