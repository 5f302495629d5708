"""
Application configuration using Pydantic Settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # App
    APP_NAME: str = "Verdant API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    
    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "verdant"
    
    # Calendar used for "today" and start-of-day arithmetic
    TIMEZONE: str = "UTC"
    
    # Care sessions
    CARE_SESSION_ADVANCE_DELAY_SECONDS: float = 0.8
    
    # AWS S3 (plant photos)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    AWS_S3_BUCKET: str = ""
    IMAGE_URL_EXPIRATION_SECONDS: int = 3600
    
    # Requests
    MAX_REQUEST_BODY_BYTES: int = 10_000_000
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
