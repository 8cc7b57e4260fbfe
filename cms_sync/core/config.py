"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "CMS Sync"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Content source (Sanity)
    SANITY_PROJECT_ID: str = "9cb050q1"
    SANITY_DATASET: str = "production"
    SANITY_API_VERSION: str = "2022-11-29"
    SANITY_TOKEN: Optional[str] = None
    SANITY_USE_CDN: bool = False
    SANITY_IMAGE_BASE_URL: str = "https://cdn.sanity.io"

    # Document store
    STORE_BACKEND: str = "firestore"  # firestore | memory
    FIRESTORE_PROJECT_ID: Optional[str] = None
    FIRESTORE_DATABASE: Optional[str] = None

    # Popular times aggregation
    POPULAR_TIMES_URL: Optional[str] = None
    POPULAR_TIMES_TIMEOUT_SECONDS: float = 30.0

    # Sync engine
    SYNC_MAX_CONCURRENCY: int = 10
    STALENESS_THRESHOLD_DAYS: int = 6
    HTTP_TIMEOUT_SECONDS: float = 15.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
