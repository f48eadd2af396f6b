"""Configuration management for Latchkey.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRETS = frozenset(
    {
        "dev-access-secret-change-me",
        "dev-refresh-secret-change-me",
        "dev-reset-secret-change-me",
    }
)


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LATCHKEY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "Latchkey"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    app_url: str | None = Field(
        default=None,
        description="Frontend base URL used to build password reset links",
    )

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8080

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./lk_data/latchkey.db"
    db_echo: bool = False

    # Token Settings
    jwt_access_secret: str = "dev-access-secret-change-me"
    jwt_refresh_secret: str = "dev-refresh-secret-change-me"
    jwt_reset_secret: str = "dev-reset-secret-change-me"
    jwt_access_expires_in: str = "15m"
    jwt_refresh_expires_in: str = "7d"
    jwt_reset_expires_in: str = "30m"

    # Revocation backends
    session_registry: Literal["null", "database"] = Field(
        default="null",
        description="'null' keeps refresh tokens stateless (no revocation)",
    )
    consumed_token_store: Literal["memory", "database"] = "memory"

    # Mail Settings
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_pass: str | None = None
    smtp_from: str | None = None
    smtp_from_name: str = "Latchkey"
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout: int = 10

    # CORS Settings
    cors_origins: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @model_validator(mode="after")
    def validate_secrets(self) -> "Settings":
        """Refuse shared signing secrets, and development secrets in production."""
        secrets = {
            "jwt_access_secret": self.jwt_access_secret,
            "jwt_refresh_secret": self.jwt_refresh_secret,
            "jwt_reset_secret": self.jwt_reset_secret,
        }
        if len(set(secrets.values())) != len(secrets):
            raise ValueError(
                "Access, refresh and reset tokens must be signed with distinct secrets"
            )
        if self.environment == "production":
            defaults = [name for name, value in secrets.items() if value in DEV_JWT_SECRETS]
            if defaults:
                raise ValueError(
                    f"Production requires real signing secrets; still using defaults for: "
                    f"{', '.join(defaults)}"
                )
        return self

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
    def mail_configured(self) -> bool:
        """Mail delivery needs at least an SMTP host and a sender address."""
        return bool(self.smtp_host and self.smtp_from)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
