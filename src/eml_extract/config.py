"""Configuration management for EML Extract.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the EML_EXTRACT_ prefix (e.g., EML_EXTRACT_OUTPUT_DIR).
    """

    model_config = SettingsConfigDict(
        env_prefix="EML_EXTRACT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Output Configuration
    output_dir: Path = Field(
        default=Path("."),
        description="Directory in which the output document is written",
    )
    output_filename: str = Field(
        default="emlOutput.xml",
        description="File name of the output document",
    )
    include_headers: bool = Field(
        default=False,
        description="Also emit every header of each message in an <emailHeaders> block",
    )

    # Source Configuration
    eml_suffix: str = Field(
        default=".eml",
        description="File extension (case-insensitive) that marks an EML source",
    )
    attachment_dir: Path | None = Field(
        default=None,
        description="Directory receiving extracted non-text body parts (disabled if unset)",
    )

    # Batch Configuration
    workers: int = Field(
        default=1,
        ge=1,
        description="Number of parallel extraction workers",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    verbose: bool = Field(
        default=False,
        description="Log every directory and file as it is processed",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @property
    def output_path(self) -> Path:
        """Full path of the output document."""
        return self.output_dir / self.output_filename


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
