"""
Application configuration.

Settings are read from ``LIBRARY_*`` environment variables and an optional
``.env`` file. ``get_settings()`` caches the first instance for the life of
the process; tests build ``Settings`` directly instead.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "library-backend"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 4000
    enable_graphiql: bool = True

    # Database
    database_url: str = "mongomock://localhost/library"

    # Authentication
    secret_key: str = "change-me-in-production-this-is-32-chars"
    token_algorithm: str = "HS256"
    token_expire_minutes: int = 24 * 60
    token_issuer: str = "library-backend"
    # Accepted for users created without a password of their own
    shared_password: str = "password"

    # Subscriptions
    subscriber_queue_size: int = 100

    # Logging
    log_dir: Path = Path(".library/logs")
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
