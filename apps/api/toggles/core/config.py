"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """
    Document store configuration.

    Backends:
    - s3: AWS S3 or S3-compatible (MinIO)
    - local: Local filesystem
    - memory: In-process dict (development/testing)
    """

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: str = Field(
        default="s3",
        description="s3, local, memory",
    )

    # S3
    bucket: str = Field(default="feature-toggles", description="Bucket name")
    region: str = Field(default="ap-south-1")
    access_key: str | None = Field(default=None)
    secret_key: str | None = Field(default=None)
    endpoint: str | None = Field(default=None, description="Custom endpoint (MinIO)")

    # Local storage
    local_path: str = Field(default="./toggle-data")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        allowed = {"s3", "local", "memory"}
        if v not in allowed:
            raise ValueError(f"storage backend must be one of {allowed}")
        return v


class AuthSettings(BaseSettings):
    """Bearer credential verification."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    secret_key: str = Field(
        default="change-me-in-production",
        description="Secret key for JWT signing",
    )
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60, ge=1)


class AuditSettings(BaseSettings):
    """Audit log configuration."""

    model_config = SettingsConfigDict(env_prefix="AUDIT_")

    log_limit: int = Field(
        default=100,
        ge=1,
        description="Entries kept per log document (newest win)",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Feature Toggle API")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    reload: bool = Field(default=False)

    # CORS
    cors_origins: list[str] = Field(default=["*"])

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    # Nested settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Shorthand
settings = get_settings()
