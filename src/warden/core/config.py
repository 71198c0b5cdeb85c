"""Configuration management for Warden.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once and is
immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WARDEN_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "Warden"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./warden_data/warden.db"
    db_echo: bool = False

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Authorization Settings
    admin_role_names: list[str] = Field(
        default=["SUPER_ADMIN", "ADMIN"],
        description="Role names treated as administrative by is_admin",
    )
    admin_max_level: int = Field(
        default=1,
        description="Roles at or below this level are administrative (0 = super admin)",
    )
    identifier_field: str = Field(
        default="id",
        description="Record primary key, always readable",
    )
    strict_permission_format: bool | None = Field(
        default=None,
        description="Raise on malformed permission strings at check time (defaults to debug builds)",
    )
    field_permission_debug: bool = Field(
        default=True,
        description="Attach field permission debug info to responses (never in production)",
    )

    # Permission Cache Settings
    permission_cache_ttl_seconds: int = 0  # 0 = entries only live for one cache instance

    @field_validator("admin_role_names", mode="before")
    @classmethod
    def parse_admin_role_names(cls, v: str | list[str]) -> list[str]:
        """Parse admin role names from comma-separated string or list."""
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @field_validator("permission_cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        """Reject negative TTLs."""
        if v < 0:
            raise ValueError("permission_cache_ttl_seconds must be >= 0")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @property
    def is_debug_build(self) -> bool:
        """Debug builds are everything that is not production, or debug=True."""
        return self.debug or not self.is_production

    @property
    def raise_on_invalid_permission(self) -> bool:
        """Whether a malformed permission string raises at check time."""
        if self.strict_permission_format is not None:
            return self.strict_permission_format
        return self.is_debug_build

    @property
    def field_debug_enabled(self) -> bool:
        """Debug channel is hard-disabled in production."""
        return self.field_permission_debug and not self.is_production


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
