"""Application settings with pydantic-settings.

All fields have development-friendly defaults so the package imports without
any environment. Control-plane credentials are optional at load time and are
checked when a gateway is built (see `require_control_plane`).

Usage:
    from appforge.config import get_settings

    settings = get_settings()
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """appforge settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Logging ===

    service_name: str = Field(
        default="appforge",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # === Project records ===

    database_url: str = Field(
        default="sqlite+aiosqlite:///./appforge.db",
        description="Async SQLAlchemy URL for project records and conversations",
        examples=["postgresql+asyncpg://user:pass@db:5432/appforge"],
    )

    # === Control plane ===

    cloudflare_account_id: str | None = Field(default=None, description="Control-plane account ID")
    cloudflare_api_token: str | None = Field(default=None, description="Control-plane API token")
    control_plane_url: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Control-plane API base URL",
    )
    dispatch_namespace: str = Field(
        default="user-apps",
        description="Dispatch namespace that holds every tenant script",
    )
    storage_bucket_name: str = Field(
        default="user-code",
        description="Shared object-storage bucket bound to every tenant app",
    )
    compatibility_date: str = Field(default="2024-01-01")
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for every control-plane call",
    )

    # === Artifact storage ===

    artifact_backend: Literal["local", "s3"] = Field(default="local")
    artifact_local_path: str = Field(default="./artifacts")
    artifact_bucket: str = Field(default="user-code")
    artifact_endpoint_url: str | None = Field(
        default=None,
        description="S3-compatible endpoint (e.g. https://<account>.r2.cloudflarestorage.com)",
    )
    artifact_access_key_id: str | None = None
    artifact_secret_access_key: str | None = None
    artifact_region: str = Field(default="auto")

    # === Generation ===

    llm_provider: Literal["openrouter", "openai"] = Field(default="openrouter")
    llm_model: str = Field(default="openai/gpt-4o")
    llm_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    code_context_messages: int = Field(
        default=10,
        ge=1,
        description="How many recent messages the code generation prompt sees",
    )

    # === Lifecycle ===

    build_stale_after_seconds: int = Field(
        default=900,
        ge=1,
        description="A build older than this is treated as abandoned",
    )
    public_base_url: str | None = Field(
        default=None,
        description="External base URL for deployed apps; request origin if unset",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    def require_control_plane(self) -> tuple[str, str]:
        """Return (account_id, api_token) or raise ConfigurationError."""
        if not self.cloudflare_account_id or not self.cloudflare_api_token:
            raise ConfigurationError(
                "CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN must be set"
            )
        return self.cloudflare_account_id, self.cloudflare_api_token


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
