"""
Core configuration module using Pydantic Settings.

This module defines all application settings loaded from environment variables.
All configuration must go through this Settings class - NO hardcoded values.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Settings are validated using Pydantic with type hints.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(default="Checkbook Permissions Service")
    version: str = Field(default="0.1.0")
    description: str = Field(
        default="Account sharing, permission requests and audit trail"
    )
    environment: Literal["development", "staging", "production"] = Field(default="development")
    debug: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)

    # -------------------------------------------------------------------------
    # Security Settings
    # -------------------------------------------------------------------------
    # Tokens are issued elsewhere; this service only validates them.
    secret_key: str = Field(
        ...,
        min_length=32,
        description="Secret key used to verify JWT access tokens. At least 32 characters."
    )
    jwt_algorithm: str = Field(default="HS256")

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------
    database_url: str = Field(
        ...,
        description="SQLAlchemy async connection string (postgresql+asyncpg://...)"
    )

    # Connection Pool Settings (ignored for SQLite)
    db_pool_size: int = Field(default=5, ge=1, le=50)
    db_max_overflow: int = Field(default=10, ge=0, le=100)
    db_pool_recycle: int = Field(default=3600, ge=300)  # Seconds
    db_pool_pre_ping: bool = Field(default=True)
    db_pool_timeout: int = Field(default=30, ge=1)

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")
    log_file_enabled: bool = Field(default=False)
    log_file_path: str = Field(default="logs/checkbook.log")
    log_file_max_bytes: int = Field(default=10485760)  # 10 MB
    log_file_backup_count: int = Field(default=5)

    # -------------------------------------------------------------------------
    # Audit Logging & Retention
    # -------------------------------------------------------------------------
    audit_log_retention_days: int = Field(default=2555, ge=1)  # 7 years
    permission_request_retention_days: int = Field(default=365, ge=1)

    # -------------------------------------------------------------------------
    # Testing Configuration
    # -------------------------------------------------------------------------
    test_database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Database used by the test suite"
    )

    @field_validator("database_url", "test_database_url")
    @classmethod
    def validate_async_driver(cls, v: str) -> str:
        """Only async drivers can back the AsyncEngine."""
        if not v.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError(
                "Database URL must use the asyncpg or aiosqlite driver"
            )
        return v

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get parsed CORS origins as list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Singleton instance of settings
# Import this instance throughout the application
settings = Settings()
