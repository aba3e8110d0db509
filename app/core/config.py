"""
Application Configuration Management

This module centralizes all configuration settings for the Hello Socks
storefront. It uses Pydantic Settings to load environment variables from
.env.local and validate their types, so a misconfigured process fails at
startup instead of on the first request.

The settings are cached using lru_cache to avoid repeated environment
variable parsing during application runtime.
"""

import sys
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PLACEHOLDER_SECRETS = ["your-secret-key", "changeme", "dev-secret", "your-secret-here"]


class Environment(str, Enum):
    """Valid application environment values."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Valid logging level values."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Stytch credentials and the session signing secret are required.
    Missing or invalid values cause the application to fail fast
    with descriptive error messages.
    """

    # Identity provider
    stytch_project_id: str = Field(
        ...,
        description="Stytch project identifier",
        min_length=1,
    )

    stytch_secret: SecretStr = Field(
        ...,
        description="Stytch project secret",
    )

    stytch_api_url: Optional[str] = Field(
        default=None,
        description="Override for the Stytch API base URL",
    )

    stytch_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for each Stytch API call",
    )

    # Sessions
    session_secret: SecretStr = Field(
        ...,
        description="Secret used to sign the session cookie",
    )

    session_duration_minutes: int = Field(
        default=60,
        gt=0,
        description="Session lifetime requested from Stytch on magic link login",
    )

    session_cookie_max_age: int = Field(
        default=30 * 24 * 60 * 60,
        gt=0,
        description="Max age of the session cookie in seconds",
    )

    # Registration
    use_whitelist: bool = Field(
        default=False,
        validation_alias=AliasChoices("usewhitelist", "use_whitelist"),
        description="Only allow users that already exist in Stytch to log in",
    )

    magic_link_redirect_url: Optional[str] = Field(
        default=None,
        description="Where magic links point to, defaults to <address>/authenticate",
    )

    magic_link_token_override: Optional[SecretStr] = Field(
        default=None,
        description="Fixed magic link token used instead of the query string (testing only)",
    )

    # Server
    address: str = Field(
        default="localhost:3000",
        description="host:port the server listens on",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment mode"
    )

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for application"
    )

    model_config = SettingsConfigDict(
        env_file=".env.local",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("session_secret")
    @classmethod
    def validate_session_secret(cls, v: SecretStr) -> SecretStr:
        """Validate the session secret meets security requirements."""
        secret_value = v.get_secret_value()

        if secret_value in PLACEHOLDER_SECRETS:
            raise ValueError(
                "SESSION_SECRET cannot use placeholder values. "
                "Generate a secure secret with: openssl rand -hex 32"
            )

        if len(secret_value) < 32:
            raise ValueError(
                "SESSION_SECRET must be at least 32 characters long for security. "
                "Generate a secure secret with: openssl rand -hex 32"
            )

        return v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate the listen address is host:port."""
        host, _, port = v.rpartition(":")
        if not host or not port.isdigit():
            raise ValueError(
                "ADDRESS must be in host:port form. Example: localhost:3000"
            )
        return v

    @model_validator(mode="after")
    def validate_token_override(self) -> "Settings":
        """Refuse the fixed magic link token outside of test environments."""
        if self.magic_link_token_override is not None and self.environment == Environment.PRODUCTION:
            raise ValueError(
                "MAGIC_LINK_TOKEN_OVERRIDE is for testing only and cannot be set in production"
            )
        return self

    @property
    def full_address(self) -> str:
        """Public base URL of the storefront."""
        return f"http://{self.address}"

    @property
    def host(self) -> str:
        return self.address.rpartition(":")[0]

    @property
    def port(self) -> int:
        return int(self.address.rpartition(":")[2])

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def magic_link_url(self) -> str:
        """URL that magic links emailed by Stytch should point to."""
        return self.magic_link_redirect_url or f"{self.full_address}/authenticate"


def create_settings() -> Settings:
    """
    Create and validate settings instance with helpful error messages.

    This function provides better error handling than the raw Settings()
    constructor, giving users clear guidance on how to fix configuration issues.
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        print("\nConfiguration Validation Error:", file=sys.stderr)
        print(f"{e}", file=sys.stderr)
        print("\nTo fix this:", file=sys.stderr)
        print("1. Create .env.local or export the variables in your shell", file=sys.stderr)
        print("2. Set STYTCH_PROJECT_ID, STYTCH_SECRET and SESSION_SECRET", file=sys.stderr)
        print("3. Ensure all values meet the format requirements", file=sys.stderr)
        sys.exit(1)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return create_settings()
