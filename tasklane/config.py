"""
Unified Configuration Management for TaskLane

Consolidates all configuration into a single source of truth using Pydantic BaseSettings.
All settings can be overridden via environment variables with TASKLANE_ prefix.

Usage:
    from tasklane.config import get_settings

    settings = get_settings()
    print(settings.app_db)
    print(settings.perms_explain)
"""

from pathlib import Path
from typing import Literal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskLaneSettings(BaseSettings):
    """
    Unified configuration for TaskLane

    All settings can be overridden via environment variables with TASKLANE_ prefix.
    Example: TASKLANE_DATA_DIR=/var/lib/tasklane
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKLANE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================
    # SYSTEM SETTINGS
    # ============================================

    environment: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode (adds technical detail to error bodies)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    structured_logs: bool = Field(
        default=False,
        description="Emit JSON log lines instead of plain text"
    )

    # ============================================
    # API SERVER SETTINGS
    # ============================================

    api_host: str = Field(
        default="localhost",
        description="API server host"
    )

    api_port: int = Field(
        default=8000,
        description="API server port"
    )

    # ============================================
    # STORAGE SETTINGS
    # ============================================

    data_dir: Path = Field(
        default=Path(".tasklane_data"),
        description="Base data directory"
    )

    db_filename: str = Field(
        default="tasklane.db",
        description="SQLite database file name inside data_dir"
    )

    # ============================================
    # PERMISSION SETTINGS
    # ============================================

    perms_explain: bool = Field(
        default=False,
        description="Enable access decision diagnostics (AccessEngine.explain)"
    )

    link_share_hash_length: int = Field(
        default=30,
        ge=16,
        description="Bytes of entropy in a link share hash"
    )

    max_items_per_page: int = Field(
        default=50,
        ge=1,
        description="Upper bound for page sizes on listing endpoints"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level"""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def app_db(self) -> Path:
        """Main application database"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / self.db_filename

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> TaskLaneSettings:
    """
    Get cached settings instance

    Returns:
        TaskLaneSettings singleton
    """
    return TaskLaneSettings()
