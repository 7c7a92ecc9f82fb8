"""Application settings for the Demesne persistence layer."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Database and logging settings, read from ``DEMESNE_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DEMESNE_", extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///demesne.db", description="SQLAlchemy URL of the game database"
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    database_pool_size: int = Field(
        default=5, description="Connections kept open (non-SQLite backends)", ge=1
    )
    database_max_overflow: int = Field(
        default=10, description="Extra connections allowed beyond the pool size", ge=0
    )
    database_pool_recycle: int = Field(
        default=3600, description="Seconds before a pooled connection is replaced", gt=0
    )
    database_pool_timeout: int = Field(
        default=30, description="Seconds to wait for a free pooled connection", gt=0
    )
    log_level: str = Field(default="INFO", description="Root log level for configure_logging")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
