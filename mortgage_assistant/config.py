from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_file=".env"
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current environment (dev, staging, or prod)",
    )
    app_host: str = Field(default="0.0.0.0", description="Interface to bind to")
    app_port: int = Field(default=3000, description="Port the HTTP server listens on")
    client_base_url: str = Field(
        default="http://localhost:5173", description="Frontend base URL for CORS"
    )

    # Tracing
    braintrust_project_name: str | None = Field(
        default=None,
        description="Braintrust project for Gemini tracing (tracing disabled when unset)",
    )


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if _app_settings is None:
        _app_settings = AppSettings()
    return _app_settings


def set_app_settings(settings: AppSettings) -> None:
    """Override the global application settings (used by tests)."""
    global _app_settings
    _app_settings = settings


def get_client_base_url() -> str:
    """Get the client base URL from settings."""
    settings = get_app_settings()
    return settings.client_base_url
