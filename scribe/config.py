"""Configuration loading for the Scribe author service.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings

DATABASE_URL and SERVER_PORT are required: the process fails fast at
startup when either is missing.
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StoreBackend = Literal["sqlite", "postgresql"]


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Required
    database_url: str = Field(
        description="Database connection URL (sqlite:path.db or postgresql://...)",
    )
    server_port: int = Field(
        description="Port to listen on for the HTTP server",
    )

    # HTTP server
    server_host: str = Field(
        default="0.0.0.0",
        description="Host to listen on for the HTTP server",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Maximum time to wait for a single request",
    )

    # Store
    store_pool_size: int = Field(
        default=5,
        description="Number of pooled database connections",
    )
    sqlite_busy_timeout_seconds: float = Field(
        default=5.0,
        description="Seconds a SQLite connection waits for the write lock",
    )

    # Notification
    notification_backend: Literal["stdout", "webhook", "none"] = Field(
        default="none",
        description="Notification backend type",
    )
    notification_webhook_url: str = Field(
        default="",
        description="Endpoint receiving author.created events",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose output",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure database URL is not blank."""
        if not v.strip():
            raise ValueError("database_url must not be empty")
        return v.strip()

    @field_validator("server_port")
    @classmethod
    def validate_server_port(cls, v: int) -> int:
        """Ensure server port is in valid range."""
        if v <= 0 or v > 65535:
            raise ValueError("server_port must be between 1 and 65535")
        return v

    @field_validator("store_pool_size")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        """Ensure pool size is positive."""
        if v <= 0:
            raise ValueError("store_pool_size must be positive")
        return v

    @field_validator("sqlite_busy_timeout_seconds", "request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure timeouts are positive."""
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @model_validator(mode="after")
    def validate_webhook_url(self) -> "Settings":
        """Require a URL when the webhook notifier is selected."""
        if self.notification_backend == "webhook" and not self.notification_webhook_url:
            raise ValueError(
                "notification_webhook_url is required when notification_backend is 'webhook'"
            )
        return self

    @property
    def store_backend(self) -> StoreBackend:
        """Store backend selected by the database URL scheme."""
        if self.database_url.startswith(("postgres://", "postgresql://")):
            return "postgresql"
        return "sqlite"


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If a required setting is missing or invalid.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "StoreBackend", "load_settings"]
