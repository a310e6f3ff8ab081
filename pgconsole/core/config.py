"""
PG Console Core Configuration
Web administration console for PostgreSQL databases
"""
from typing import List
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "PG Console"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Browse, query and edit PostgreSQL tables over a REST API"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # Bookkeeping database - connections, metadata, activity, settings
    DATABASE_URL: str = "postgresql://postgres@localhost:5432/postgres"
    DATABASE_POOL_MIN_SIZE: int = 1
    DATABASE_POOL_SIZE: int = 10
    DATABASE_POOL_TIMEOUT: int = 60

    # Target databases - one pool per registered connection
    TARGET_POOL_MIN_SIZE: int = 0
    TARGET_POOL_MAX_SIZE: int = 5
    CONNECT_TIMEOUT: int = 10

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 1000

    # Activity log
    DEFAULT_ACTIVITY_LIMIT: int = 10
    MAX_ACTIVITY_LIMIT: int = 500

    # Setup wizard
    SECRETS_FILE: str = "secrets.json"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    def get_database_dsn(self) -> str:
        """Normalize DATABASE_URL to a DSN asyncpg accepts"""
        url = self.DATABASE_URL
        if url.startswith("postgresql+asyncpg://"):
            url = url.replace("postgresql+asyncpg://", "postgresql://", 1)
        elif url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
