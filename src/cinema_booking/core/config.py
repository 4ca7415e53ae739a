"""
Application configuration using Pydantic Settings
"""
from pathlib import Path
from typing import List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Application
    APP_NAME: str = "Cinema Ticket Booking API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Booking Settings
    HOLD_DURATION_MINUTES: int = 10
    MAX_SEATS_PER_BOOKING: int = 10
    DEFAULT_PAGE_SIZE: int = 20

    # Background Workers (off: holds are only expired when read)
    EXPIRY_SWEEPER_ENABLED: bool = False
    EXPIRY_SWEEP_INTERVAL_SECONDS: int = 30
    RECONCILE_ON_SWEEP: bool = True

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CACHE_TTL: int = 300
    REDIS_SEATS_TTL: int = 30

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # CORS
    CORS_ORIGINS: Union[List[str], str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    class Config:
        env_file = None  # Will be set dynamically
        env_file_encoding = 'utf-8'
        case_sensitive = True
        extra = 'ignore'


def find_env_file() -> Optional[str]:
    """Search for .env file in common locations"""
    locations = [
        Path.cwd() / '.env',
        Path(__file__).resolve().parent.parent.parent.parent / '.env',  # Project root
    ]

    for loc in locations:
        if loc.exists():
            return str(loc)
    return None


Settings.model_config['env_file'] = find_env_file()

# Global settings instance
settings = Settings()
