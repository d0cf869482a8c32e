"""
Configuration settings for the Artisan Network Store.

Uses Pydantic Settings to load environment variables for the storage backend,
export location, payroll constants, and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Record store
    store_backend: str = Field("sqlite", alias="STORE_BACKEND")
    store_name: str = Field("ArtisanManagementDB", alias="STORE_NAME")
    store_path: Path = Field(Path("data"), alias="STORE_PATH")
    store_timeout_seconds: float = Field(5.0, gt=0, alias="STORE_TIMEOUT_SECONDS")

    # PostgreSQL backend
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("artisan_management", alias="DB_NAME")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(4, alias="DB_POOL_MAX_SIZE")

    # Exports and payroll
    export_dir: Path = Field(Path("exports"), alias="EXPORT_DIR")
    pay_rate_per_product: int = Field(50, ge=0, alias="PAY_RATE_PER_PRODUCT")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("store_backend")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        return value.strip().lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
