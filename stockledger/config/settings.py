"""
Runtime configuration, read from the environment and an optional ``.env``.

Each concern has its own prefix: ``STORAGE_``, ``LEDGER_``, ``BACKUP_`` and
``API_``. Top-level values (``ENVIRONMENT``, ``LOG_LEVEL``) have none.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """SQLite file location and connection tuning."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", extra="ignore")

    data_dir: Path = Path("data")
    db_name: str = "stockledger.db"
    pool_size: int = Field(default=5, ge=1, le=32)
    busy_timeout: int = Field(default=30_000, ge=0, description="Milliseconds to wait on a locked file")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LEDGER_", extra="ignore")

    low_stock_threshold: int = Field(default=5, ge=1)
    top_products_limit: int = Field(default=5, ge=1)
    recent_movements_limit: int = Field(default=10, ge=1)


class BackupSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BACKUP_", extra="ignore")

    max_size_bytes: int = Field(default=50 * 1024 * 1024, gt=0)
    file_prefix: str = Field(default="stockledger-backup", min_length=1)
    export_dir: Path = Path("data/backups")


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_", extra="ignore")

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False
    # Comma separated; empty disables CORS
    cors_origins: str = "*"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "StockLedger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    backup: BackupSettings = Field(default_factory=BackupSettings)
    api: APISettings = Field(default_factory=APISettings)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @model_validator(mode="after")
    def create_data_dir(self) -> "Settings":
        self.storage.data_dir.mkdir(parents=True, exist_ok=True)
        return self


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first call."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
