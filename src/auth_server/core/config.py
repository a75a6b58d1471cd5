# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from pathlib import Path

from beartype import beartype
from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # Environment
    api_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="API environment",
    )

    # Key material
    keystore_path: Path = Field(
        default=Path("jwt.p12"),
        description="PKCS#12 keystore holding the token signing keypair",
    )
    keystore_passphrase: SecretStr = Field(
        default=SecretStr("test-keystore-passphrase"),
        description="Passphrase protecting the keystore",
    )
    key_alias: str = Field(
        default="jwt",
        min_length=1,
        description="Friendly name of the signing key inside the keystore",
    )

    # Token lifetimes
    access_token_validity_seconds: int = Field(
        default=12 * 3600,
        ge=60,
        description="Access token lifetime when the client does not set one",
    )
    refresh_token_validity_seconds: int = Field(
        default=30 * 86400,
        ge=60,
        description="Refresh token lifetime when the client does not set one",
    )
    authorization_code_validity_seconds: int = Field(
        default=300,
        ge=30,
        le=600,
        description="Lifetime of signed authorization code artifacts",
    )
    issuer: str | None = Field(
        default=None,
        description="Optional `iss` claim stamped into every token",
    )
    introspection_required_scope: str | None = Field(
        default=None,
        description="Scope the caller's bearer token needs for check_token",
    )

    # Credential hashing
    password_schemes: list[str] = Field(
        default_factory=lambda: ["argon2", "pbkdf2_sha256"],
        min_length=1,
        description="passlib schemes accepted for client secrets and passwords",
    )

    # Database
    database_url: str | None = Field(
        default=None,
        description="PostgreSQL URL for client and user records",
    )
    database_pool_min: int = Field(default=2, ge=1, le=20)
    database_pool_max: int = Field(default=10, ge=1, le=100)
    database_command_timeout: float = Field(default=10.0, ge=1.0, le=120.0)

    # API
    api_host: str = Field(
        default="0.0.0.0",  # nosec B104 - containerized deployment
        description="API host to bind to",
    )
    api_port: int = Field(default=8080, ge=1, le=65535)
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    @field_validator("database_pool_max")
    @classmethod
    def validate_pool_sizes(cls: type["Settings"], v: int, info: ValidationInfo) -> int:
        """Ensure pool max is greater than pool min."""
        if "database_pool_min" in info.data:
            min_size = info.data["database_pool_min"]
            if v < min_size:
                raise ValueError(
                    f"database_pool_max ({v}) must be >= database_pool_min ({min_size})"
                )
        return v

    @field_validator("keystore_passphrase")
    @classmethod
    def validate_keystore_passphrase(
        cls: type["Settings"], v: SecretStr, info: ValidationInfo
    ) -> SecretStr:
        """Ensure the test passphrase is not used in production."""
        if info.data.get("api_env") == "production":
            if v.get_secret_value().startswith("test-"):
                raise ValueError(
                    "Test keystore passphrase cannot be used in production. "
                    "Set AUTH_KEYSTORE_PASSPHRASE environment variable."
                )
        return v

    @field_validator("refresh_token_validity_seconds")
    @classmethod
    def validate_refresh_outlives_access(
        cls: type["Settings"], v: int, info: ValidationInfo
    ) -> int:
        """Refresh tokens must live longer than the access tokens they renew."""
        access = info.data.get("access_token_validity_seconds")
        if access is not None and v <= access:
            raise ValueError(
                f"refresh_token_validity_seconds ({v}) must exceed "
                f"access_token_validity_seconds ({access})"
            )
        return v

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.api_env == "production"


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
