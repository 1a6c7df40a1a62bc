"""Application configuration management using Pydantic Settings.

This module loads and validates environment variables using Pydantic Settings.
All configuration is loaded from environment variables or a .env file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        database_url: SQLAlchemy connection string for the document store
        database_pool_size: Number of connections to maintain in pool
        database_max_overflow: Maximum overflow connections beyond pool_size
        environment: Application environment (development, staging, production)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        surveys_dir: Directory of YAML survey definitions seeded at startup
        admin_api_token: Bearer token required by the admin endpoints
        public_base_url: Origin used to build share links and embed codes
        asset_dir: Directory where uploaded banner images are written
        asset_base_url: Public URL prefix that serves asset_dir
        recent_activity_days: Trailing window for the "recent responses" metric
        display_timezone: IANA zone used when formatting timestamps for export
        export_timestamp_format: strftime format for exported timestamps
        allowed_origins: Comma-separated list of allowed CORS origins
        auto_create_tables: Create missing tables on startup
    """

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./surveykit.db",
        description="SQLAlchemy connection string"
    )
    database_pool_size: int = Field(
        default=5,
        description="Number of database connections in pool"
    )
    database_max_overflow: int = Field(
        default=10,
        description="Maximum overflow connections beyond pool size"
    )

    # Application Configuration
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    surveys_dir: Optional[str] = Field(
        default=None,
        description="Path to directory of YAML survey definitions to seed"
    )

    # Security Configuration
    admin_api_token: str = Field(
        description="Bearer token for the admin area"
    )
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Sharing and Assets
    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL used for share links"
    )
    asset_dir: str = Field(
        default="./assets",
        description="Directory for uploaded banner images"
    )
    asset_base_url: str = Field(
        default="http://localhost:8000/assets",
        description="Public URL prefix for uploaded assets"
    )

    # Results
    recent_activity_days: int = Field(
        default=7,
        ge=1,
        description="Trailing window in days for recent activity"
    )
    display_timezone: str = Field(
        default="UTC",
        description="Time zone for exported timestamps"
    )
    export_timestamp_format: str = Field(
        default="%d/%m/%Y, %H:%M:%S",
        description="strftime format for exported timestamps"
    )

    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables at startup"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v_upper

    @field_validator("public_base_url", "asset_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Store base URLs without a trailing slash."""
        return v.rstrip("/")

    def get_allowed_origins_list(self) -> List[str]:
        """Parse allowed_origins string into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton

    Note:
        Uses lru_cache to ensure settings are only loaded once
        and shared across the application.
    """
    return Settings()
