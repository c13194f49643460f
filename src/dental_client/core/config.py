"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # REST backend
    api_base_url: str = "http://localhost:5000"
    request_timeout: float = 10.0

    # Durable local storage
    storage_backend: Literal["file", "redis", "memory"] = "file"
    storage_path: str = ".dental-client/storage.json"
    redis_url: str = "redis://localhost:6379"
    redis_enabled: bool = True
    redis_key_prefix: str = "dental:"

    # Storage keys shared with the web client
    session_storage_key: str = "dental-auth"
    language_storage_key: str = "language"
    default_language: str = "en"

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths are joined with a leading slash."""
        return v.strip().rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
