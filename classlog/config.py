# ABOUTME: Application configuration and settings
# ABOUTME: Loads settings from environment variables using pydantic-settings

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./data/classlog.db"
    documents_dir: str = "./data/documents"
    active_document_id: str | None = None
    cache_ttl_seconds: int = 600
    bathroom_cache_ttl_seconds: int = 60
    bathroom_limit_default: int = 3
    lock_timeout_ms: int = 5000
    batch_lock_timeout_ms: int = 30000
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Returns cached settings instance."""
    return Settings()
