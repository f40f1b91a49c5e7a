"""Configuration settings for bento_sync.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Public bucket hosting the Bento boxes
DEFAULT_BUCKET_URL = "http://opscode-vm-bento.s3.amazonaws.com"

# Only VirtualBox boxes are mirrored
DEFAULT_KEY_PREFIX = "vagrant/virtualbox/"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the BENTO_SYNC_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="BENTO_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote
    bucket_url: str = Field(
        default=DEFAULT_BUCKET_URL,
        description="Base URL of the bucket holding the boxes",
    )
    key_prefix: str = Field(
        default=DEFAULT_KEY_PREFIX,
        description="Only keys under this prefix are considered",
    )

    # Paths
    download_dir: Path = Field(
        default_factory=Path.cwd,
        description="Root directory mirroring the bucket key layout",
    )
    registry_file: Path | None = Field(
        default=None,
        description="YAML file overriding the built-in registry of boxes",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )

    # Timeouts (in seconds)
    listing_timeout: int = Field(
        default=60,
        ge=1,
        description="Timeout for the bucket listing request",
    )
    download_timeout: int = Field(
        default=3600,
        ge=60,
        description="Timeout for a single box download",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


__all__ = [
    "DEFAULT_BUCKET_URL",
    "DEFAULT_KEY_PREFIX",
    "Settings",
    "get_settings",
]
