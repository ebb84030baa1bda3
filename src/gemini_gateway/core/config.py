"""
Configuration management for gemini-gateway.

This module handles all application configuration using Pydantic Settings
for environment variable management and validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthConfig(BaseSettings):
    """OAuth and credential storage settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore"
    )

    # OAuth client (the public gemini-cli installed-app credentials)
    client_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_CLI_CLIENT_ID", "AUTH_CLIENT_ID"),
        description="Google OAuth client ID"
    )
    client_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_CLI_CLIENT_SECRET", "AUTH_CLIENT_SECRET"),
        description="Google OAuth client secret"
    )
    client_config_file: Path = Field(
        default=Path("./oauth-client.json"),
        description="JSON file with clientId/clientSecret, used when env values are absent"
    )
    scopes: List[str] = Field(
        default=[
            "https://www.googleapis.com/auth/cloud-platform",
            "https://www.googleapis.com/auth/userinfo.email",
            "https://www.googleapis.com/auth/userinfo.profile",
            "openid",
        ],
        description="OAuth scopes requested at login"
    )

    # Token settings
    token_refresh_threshold: int = Field(
        default=300,
        description="Seconds before expiry to refresh the access token",
        ge=0,
        le=3600
    )

    # Credential storage
    legacy_credentials_path: Path = Field(
        default=Path("~/.gemini/oauth_creds.json"),
        description="Plaintext credential file written by gemini-cli"
    )
    keyring_service: str = Field(
        default="gemini-gateway",
        description="Secure store service name"
    )
    keyring_username: str = Field(
        default="oauth-tokens",
        description="Secure store account name"
    )

    # Login flow
    login_state_ttl: int = Field(
        default=600,
        description="Seconds a pending login state stays valid",
        ge=30,
        le=3600
    )

    @field_validator("legacy_credentials_path")
    @classmethod
    def expand_credentials_path(cls, v: Path) -> Path:
        """Expand ~ in the legacy credentials path."""
        return v.expanduser()


class GeminiConfig(BaseSettings):
    """Upstream Code Assist API settings."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore"
    )

    code_assist_base_url: str = Field(
        default="https://cloudcode-pa.googleapis.com/v1internal",
        description="Code Assist API base URL"
    )
    default_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used when the request does not name one"
    )
    timeout: float = Field(
        default=120.0,
        description="Upstream request timeout in seconds",
        gt=0,
        le=600
    )
    max_retries: int = Field(
        default=3,
        description="Additional attempts after a 429 response",
        ge=0,
        le=10
    )
    retry_base_delay: float = Field(
        default=1.0,
        description="Linear backoff unit in seconds when no retry delay is provided",
        ge=0
    )
    project_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "GOOGLE_CLOUD_PROJECT", "GOOGLE_CLOUD_PROJECT_ID", "GEMINI_PROJECT_ID"
        ),
        description="Project hint sent to loadCodeAssist"
    )
    quota_cache_ttl: int = Field(
        default=60,
        description="Seconds a quota lookup is cached",
        ge=0,
        le=3600
    )


class ServerConfig(BaseSettings):
    """Server configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        case_sensitive=False,
        extra="ignore"
    )

    host: str = Field(
        default="127.0.0.1",
        description="Server host address"
    )
    port: int = Field(
        default=7965,
        description="Server port",
        ge=1,
        le=65535
    )

    # CORS settings
    cors_origins: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    cors_methods: List[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed CORS methods"
    )
    cors_headers: List[str] = Field(
        default=["*"],
        description="Allowed CORS headers"
    )


class LoggingConfig(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Logging level"
    )
    format: str = Field(
        default="text",
        description="Log format (json or text)"
    )
    file_path: Optional[str] = Field(
        default=None,
        description="Log file path (optional)"
    )
    max_file_size: int = Field(
        default=10485760,  # 10MB
        description="Maximum log file size in bytes",
        ge=1048576,  # 1MB
        le=104857600  # 100MB
    )
    backup_count: int = Field(
        default=5,
        description="Number of backup log files",
        ge=1,
        le=20
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = {"json", "text"}
        if v.lower() not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application info
    app_name: str = Field(
        default="gemini-gateway",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )
    app_description: str = Field(
        default="OpenAI-compatible gateway for the Gemini Code Assist API",
        description="Application description"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Sub-configurations
    auth: AuthConfig = Field(default_factory=AuthConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
