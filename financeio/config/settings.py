"""
Configuration Management for FinanceIO

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger itself needs very little: where to keep the data file,
where to drop export files, and how to log.
"""

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FinanceIOSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from FINANCEIO_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCEIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    data_file: Optional[Path] = Field(
        default=None,
        description="JSON file holding the ledger. In-memory store when unset.",
    )

    # Export
    export_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory that receives CSV export files",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level name (DEBUG, INFO, WARNING, ERROR)",
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON instead of console output",
    )

    # Dashboard
    recent_activity_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of entries in the recent activity feed",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def uses_file_storage(self) -> bool:
        return self.data_file is not None


@lru_cache()
def get_settings() -> FinanceIOSettings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return FinanceIOSettings()
