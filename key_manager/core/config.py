"""
Application configuration settings.

Central configuration module using Pydantic BaseSettings with environment variable support.
Loads from .env file and environment variables.
"""
import json
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file if it exists (python-dotenv)
env_path = Path(".env")
if env_path.exists():
    load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # App settings
    APP_NAME: str = "API Key Manager"
    APP_ENV: str = Field(default="local")
    DEBUG: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)

    # Database settings - full connection string (highest priority)
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="Database connection URL",
    )

    # Discrete connection settings (MySQL by default)
    DB_DRIVER: str = Field(default="mysql+pymysql")
    DB_HOST: Optional[str] = Field(default=None)
    DB_PORT: Optional[str] = Field(default=None)
    DB_USER: Optional[str] = Field(default=None)
    DB_PASSWORD: Optional[str] = Field(default=None)
    DB_NAME: Optional[str] = Field(default=None)

    # Connection pool bounds (ignored for SQLite)
    DB_POOL_SIZE: int = Field(default=10, ge=1)
    DB_POOL_TIMEOUT: int = Field(default=30, ge=1, description="Seconds to wait for a pooled connection")

    @property
    def sqlalchemy_database_uri(self) -> str:
        """
        Build SQLAlchemy database URI with priority:
        1. DATABASE_URL (full URL)
        2. DB_* vars (host/user/password/name/port)
        3. SQLite (local development)
        """
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Hosted Postgres providers still hand out postgres:// URLs
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+psycopg2://", 1)
            return url

        if self.DB_HOST and self.DB_USER and self.DB_NAME:
            password = quote_plus(self.DB_PASSWORD or "")
            port = f":{self.DB_PORT}" if self.DB_PORT else ""
            return f"{self.DB_DRIVER}://{self.DB_USER}:{password}@{self.DB_HOST}{port}/{self.DB_NAME}"

        return "sqlite:///./key_manager.db"

    # API key issuance
    KEY_PREFIX: str = Field(default="APIKEY_S3CR3T_", min_length=1)
    KEY_VALIDITY_DAYS: int = Field(default=30, ge=1, description="Days an issued key stays valid")

    # Admin credentials
    JWT_SECRET: Optional[str] = Field(
        default=None,
        description="Secret used to sign admin bearer credentials",
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRY_SECONDS: int = Field(default=3600, ge=1)
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # CORS settings
    CORS_ORIGINS: Union[str, List[str]] = Field(
        default='["http://localhost:3000", "http://localhost:8501"]',
    )

    @field_validator("CORS_ORIGINS")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not JSON, treat as comma-separated
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Static frontend (served under /static when the directory exists)
    STATIC_DIR: Optional[str] = Field(default="public")

    # Schema management
    RUN_MIGRATIONS: bool = Field(
        default=False,
        description="Run Alembic upgrade to head on startup instead of relying on create_all",
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    LOG_DIR: Optional[str] = Field(default="logs", description="Directory for rotating log files; empty disables")

    @property
    def is_local(self) -> bool:
        return self.APP_ENV.lower() in ("local", "dev", "development", "test")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
