"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")
    port: int = Field(default=8000, description="Port to bind the server to")
    reload: bool = Field(default=False, description="Enable auto-reload for development")

    # Rate limiting configuration
    rate_limit_per_minute: int = Field(
        default=100,
        description="Maximum number of HTTP requests allowed per IP address per minute",
    )

    # Admin endpoint
    admin_command_token: str | None = Field(
        default=None,
        description="Shared secret for /admin endpoints (disabled when unset)",
    )

    # Delivery
    location_buffer_size: int = Field(
        default=16,
        description="Users with a queued location per connection before the oldest is dropped",
    )
    outbox_max_events: int = Field(
        default=1000,
        description="Non-location events queued per connection before it is considered stalled",
    )
    location_authorization_ttl_seconds: float = Field(
        default=5.0,
        description="Seconds a fan-out authorization answer is reused (0 asks on every sample)",
    )

    # Chat history pagination
    history_page_size: int = Field(default=50, description="Default message history page size")
    max_history_page_size: int = Field(
        default=100, description="Largest message history page a client may request"
    )

    # External collaborators
    auth_service_url: str | None = Field(
        default=None,
        description="Base URL of the token validation service (tokens from TOML when unset)",
    )
    directory_service_url: str | None = Field(
        default=None,
        description="Base URL of the friendship service (friendships from TOML when unset)",
    )
    http_timeout_seconds: float = Field(
        default=5.0, description="Timeout for requests to external collaborators in seconds"
    )

    # TOML config file with tokens, friendships and areas for the in-memory collaborators
    config_file: str | None = Field(
        default="config.example.toml",
        description="Path to TOML configuration file for development collaborators",
    )

    @field_validator("location_buffer_size", "outbox_max_events")
    @classmethod
    def validate_buffer_size(cls, v: int) -> int:
        """Validate queue sizes are positive."""
        if v < 1:
            raise ValueError("queue sizes must be at least 1")
        return v

    @field_validator("location_authorization_ttl_seconds")
    @classmethod
    def validate_authorization_ttl(cls, v: float) -> float:
        """Validate the authorization TTL is not negative."""
        if v < 0:
            raise ValueError("location_authorization_ttl_seconds must not be negative")
        return v

    @field_validator("max_history_page_size")
    @classmethod
    def validate_max_page_size(cls, v: int) -> int:
        """Validate the maximum page size is positive."""
        if v < 1:
            raise ValueError("max_history_page_size must be at least 1")
        return v

    def load_toml_data(self) -> dict[str, Any]:
        """Load and parse the TOML config file.

        Returns an empty dict when no file is configured or the default example
        file is missing.
        """
        if not self.config_file:
            return {}

        config_path = Path(self.config_file)
        if not config_path.exists():
            if self.config_file == "config.example.toml":
                return {}
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            return tomllib.load(f)
