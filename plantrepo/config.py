"""
Configuration settings for plantrepo.

Uses Pydantic Settings to load environment variables for the remote plant
service, the local store backend, logging, and the sort executor.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PLANTS_BASE_URL = (
    "https://raw.githubusercontent.com/googlecodelabs/kotlin-coroutines/master/"
    "advanced-coroutines-codelab/sunflower/src/main/assets/"
)


class Settings(BaseSettings):
    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Remote plant service
    plants_base_url: str = Field(DEFAULT_PLANTS_BASE_URL, alias="PLANTS_BASE_URL")
    network_timeout_seconds: float = Field(10.0, alias="NETWORK_TIMEOUT_SECONDS")

    # Local store
    store_backend: Literal["memory", "postgres"] = Field("memory", alias="STORE_BACKEND")
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("plants", alias="DB_NAME")

    # Read paths
    sort_workers: int = Field(2, alias="SORT_WORKERS", ge=1)
    read_strategy: Literal["combined", "sequential"] = Field("combined", alias="READ_STRATEGY")
    refresh_max_age_seconds: Optional[float] = Field(None, alias="REFRESH_MAX_AGE_SECONDS")

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


__all__ = ["DEFAULT_PLANTS_BASE_URL", "Settings", "get_settings"]
