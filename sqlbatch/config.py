"""
Configuration settings for sqlbatch.

Uses Pydantic Settings to load environment variables for the database
connection used by the CLI, logging, and the batch size ceilings applied by
the writer when a call does not override them.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("sqlbatch", alias="DB_NAME")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Batching defaults
    dialect: str = Field("postgresql", alias="SQLBATCH_DIALECT")
    batch_size: int = Field(300, ge=1, alias="SQLBATCH_BATCH_SIZE")
    bulk_batch_size: int = Field(1000, ge=1, alias="SQLBATCH_BULK_BATCH_SIZE")
    bulk_timeout_seconds: int = Field(60, ge=0, alias="SQLBATCH_BULK_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
