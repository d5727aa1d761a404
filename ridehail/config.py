"""
RideHail - Configuration Management

Centralized configuration using Pydantic Settings.
All secrets and connection strings are loaded from environment variables.

Security: No secrets are hardcoded. Use .env for local development.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        JWT_ACCESS: Signing secret for access tokens
        JWT_REFRESH: Signing secret for refresh tokens
        ENVIRONMENT: Deployment environment; "production" enables Secure cookies
        DATABASE_URL: SQLModel connection string
        ALLOWED_ORIGINS: CORS allowed origins for the frontend
    """

    # Security
    JWT_ACCESS: str = ""  # Must be set via environment
    JWT_REFRESH: str = ""  # Must be set via environment
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 10
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_WORK_FACTOR: int = 10

    ENVIRONMENT: str = "development"

    # Database (PostgreSQL for production, SQLite for development)
    DATABASE_URL: str = "sqlite:///./ridehail.db"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 5001
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()
