"""Configuration settings for SpendWise."""

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """Database configuration."""

    url: str = Field(default_factory=lambda: os.getenv("SPENDWISE_DB_URL", "sqlite:///data/spendwise.db"))
    echo: bool = Field(default_factory=lambda: os.getenv("SPENDWISE_DB_ECHO", "false").lower() == "true")


class StorageConfig(BaseModel):
    """Record store configuration."""

    # All expenses live in one JSON blob under this key
    storage_key: str = Field(default_factory=lambda: os.getenv("SPENDWISE_STORAGE_KEY", "expense-tracker-data"))


class AppConfig(BaseModel):
    """Application configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    data_dir: Path = Field(default_factory=lambda: Path(os.getenv("SPENDWISE_DATA_DIR", "data")))
    export_dir: Path = Field(default_factory=lambda: Path(os.getenv("SPENDWISE_EXPORT_DIR", "data/exports")))
    log_level: str = Field(default_factory=lambda: os.getenv("SPENDWISE_LOG_LEVEL", "INFO"))

    default_currency: str = "USD"
    vendor_limit: int = Field(10, ge=1)

    def ensure_dirs(self) -> None:
        """Create necessary directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.export_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging for command line entry points.

    Library modules only acquire loggers via ``logging.getLogger(__name__)``.
    """
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
