"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class StorageMode(str, Enum):
    """Where meal records live"""

    LOCAL = "local"
    REMOTE = "remote"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="SnapCal", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # Backend selection
    storage_mode: StorageMode = Field(
        default=StorageMode.REMOTE,
        description="Preferred backend; remote is only used when a database URL is set",
    )
    remote_database_url: Optional[str] = Field(
        default=None,
        description="Relational backend URL, e.g. postgresql+psycopg2://user@host/snapcal",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")

    # Local device store
    local_store_path: Optional[str] = Field(
        default=None, description="JSON file backing the local store; memory only when unset"
    )
    local_quota_bytes: int = Field(
        default=5 * 1024 * 1024, ge=1, description="Hard capacity of the local store"
    )

    # Startup
    db_init_attempts: int = Field(
        default=3, ge=1, description="Attempts to reach the remote database at startup"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between startup attempts"
    )

    # Record policies
    retention_days: int = Field(
        default=30, ge=1, description="Raw entries older than this are rolled up"
    )
    migration_batch_size: int = Field(
        default=5, ge=1, description="Entries per upload batch during migration"
    )
    remote_list_limit: int = Field(
        default=200, ge=1, description="Row cap for remote entry listings"
    )
    default_daily_goal: int = Field(default=2000, ge=0, description="Fallback kcal goal")

    # Cache TTLs
    cache_default_ttl_sec: float = Field(default=300, gt=0)
    cache_image_ttl_sec: float = Field(default=1800, gt=0)
    cache_user_ttl_sec: float = Field(default=1800, gt=0)
    cache_date_ttl_sec: float = Field(default=120, gt=0)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(
        default="SnapCal Storage API", description="API documentation title"
    )
    api_description: str = Field(
        default="Meal log persistence with local and cloud backends",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("storage_mode", mode="before")
    @classmethod
    def validate_storage_mode(cls, v):
        """Accept the legacy 'cloud' spelling"""
        if isinstance(v, str):
            v = v.lower()
            return StorageMode.REMOTE if v == "cloud" else StorageMode(v)
        return v

    @property
    def remote_configured(self) -> bool:
        return bool(self.remote_database_url)

    @property
    def use_remote(self) -> bool:
        """Backend selector: remote only when configured and preferred"""
        return self.remote_configured and self.storage_mode == StorageMode.REMOTE

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING


# Global settings instance
settings = Settings()
