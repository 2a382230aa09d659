"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

GOOGLE_TOKEN_ENDPOINT = "https://www.googleapis.com/oauth2/v4/token"
JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class OAuth2ProviderConfig(BaseModel):
    """OAuth2 provider configuration model."""

    authorization_endpoint: str = Field(description="Provider consent page URL")
    token_endpoint: str = Field(description="Authorization-code exchange endpoint URL")
    userinfo_endpoint: str = Field(description="Profile endpoint of the signed-in user")
    client_id: str = Field(default="", description="Client ID issued by the provider")
    client_secret: str = Field(
        default="", description="Client secret issued by the provider"
    )
    redirect_uri: str = Field(default="", description="Callback URI for this provider")
    scopes: list[str] = Field(
        default_factory=list, description="Scopes requested on the consent page"
    )
    enabled: bool = Field(default=True, description="Enable this provider")

    @property
    def is_configured(self) -> bool:
        """Whether the credentials needed for the code exchange are present."""
        return bool(self.client_id and self.client_secret and self.redirect_uri)


class OAuth2Config(BaseModel):
    """OAuth2 login configuration model."""

    providers: dict[str, OAuth2ProviderConfig] = Field(
        default_factory=dict, description="OAuth2 provider configurations"
    )


class ServiceAccountConfig(BaseModel):
    """Google service account used for the JWT-bearer grant."""

    issuer_email: str = Field(default="", description="Service account e-mail (iss)")
    private_key: str | None = Field(
        default=None, description="PEM encoded RSA private key"
    )
    private_key_file: str | None = Field(
        default=None, description="Path to a file holding the PEM private key"
    )
    scope: str = Field(
        default="https://www.googleapis.com/auth/spreadsheets",
        description="Target API scope",
    )
    token_endpoint: str = Field(
        default=GOOGLE_TOKEN_ENDPOINT, description="Token endpoint (also the aud claim)"
    )
    token_lifetime_seconds: int = Field(
        default=3600, description="Lifetime of the signed assertion"
    )
    refresh_margin_seconds: int = Field(
        default=60, description="Cached tokens expiring within this margin are reminted"
    )

    @property
    def signing_key(self) -> str | None:
        """Resolve the PEM private key from inline config or the key file."""
        if self.private_key:
            return self.private_key
        if self.private_key_file:
            try:
                return Path(self.private_key_file).read_text()
            except OSError as e:
                raise ValueError("Failed to read service account private key.") from e
        return None


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./authgate.db", description="Database connection URL"
    )
    echo: bool = Field(default=False, description="Echo SQL statements")


class RedisConfig(BaseModel):
    """Redis configuration model."""

    enabled: bool = Field(default=False, description="Use Redis for session storage")
    url: str = Field(default="", description="Redis connection URL")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    redirect_base_url: str = Field(
        default="http://localhost:8000/login",
        description="Where users land after a successful OAuth callback",
    )
    session_max_age: int = Field(
        default=7 * 24 * 3600, description="Session maximum age in seconds"
    )
    session_cookie_name: str = Field(default="sid", description="Session cookie name")
    session_header_name: str = Field(
        default="X-Session-Id", description="Session header name"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    oauth: OAuth2Config = Field(
        default_factory=OAuth2Config, description="OAuth2 provider configuration"
    )
    service_account: ServiceAccountConfig = Field(
        default_factory=ServiceAccountConfig,
        description="Google service account configuration",
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    redis: RedisConfig = Field(
        default_factory=RedisConfig, description="Redis configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
