"""
Configuration management using Pydantic Settings.
All settings loaded from environment variables or .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", alias="APP_ENV"
    )
    client_origin: str = Field(default="https://dashboard.rapidcall.ai", alias="CLIENT_ORIGIN")
    crm_port: int = Field(default=8788, alias="CRM_PORT")
    admin_port: int = Field(default=8789, alias="ADMIN_PORT")

    # Database (shared with the main calling platform)
    database_url: str = Field(..., alias="DATABASE_URL")
    database_ssl: bool = Field(default=True, alias="DATABASE_SSL")
    database_pool_max: int = Field(default=20, alias="DATABASE_POOL_MAX")
    database_statement_timeout_ms: int = Field(
        default=30000, alias="DATABASE_STATEMENT_TIMEOUT_MS"
    )

    # CRM auth (sessions table)
    auth_cookie_name: str = Field(default="auth_token", alias="AUTH_COOKIE_NAME")

    # Admin auth (signed tokens)
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")
    admin_jwt_secret: str | None = Field(default=None, alias="ADMIN_JWT_SECRET")
    admin_jwt_ttl_hours: int = Field(default=12, alias="ADMIN_JWT_TTL_HOURS")
    admin_cookie_name: str = Field(default="admin_auth_token", alias="ADMIN_COOKIE_NAME")

    # Redis (Celery Broker)
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    # Calls placed from the dashboard "test call" button carry this in `to`
    test_call_sentinel: str = Field(default="webtest", alias="TEST_CALL_SENTINEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Normalize Heroku-style postgres:// URLs for SQLAlchemy."""
        if v.startswith("postgres://"):
            return "postgresql://" + v[len("postgres://"):]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    def get_allowed_origins(self) -> list[str]:
        """Origins allowed to call the services with credentials."""
        return [
            self.client_origin,
            "http://localhost:5173",  # Vite dev server
            "http://localhost:3000",
        ]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()
