"""
Configuration settings for the kanban bulk operations engine.
Values are loaded from environment variables or a local .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Kanban Bulk Operations"
    debug: bool = False
    log_level: str = "INFO"

    # Selection
    selection_storage_key: str = "kanban-board-selection"
    max_selection_count: Optional[int] = Field(default=None, ge=1)

    # Statuses that count as actively worked (delete is blocked on these)
    in_progress_statuses: List[str] = Field(default_factory=lambda: ["IN_PROGRESS"])

    # Execution
    bulk_max_concurrency: Optional[int] = Field(default=10, ge=1)

    # Redis (shared selection storage, optional)
    redis_url: str = ""
    redis_key_prefix: str = "kanban-board:"

    # Export
    export_filename_stem: str = "tickets-export"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the application settings."""
    return settings
