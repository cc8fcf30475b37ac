"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        TENANCY_DB_HOST: Database host (default: localhost)
        TENANCY_DB_PORT: Database port (default: 5432)
        TENANCY_DB_DATABASE: Database name (default: tenancy)
        TENANCY_DB_USERNAME: Database user (default: tenancy)
        TENANCY_DB_PASSWORD: Database password (required in production)
        TENANCY_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        TENANCY_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANCY_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="tenancy", description="Database name")
    username: str = Field(default="tenancy", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class OIDCSettings(BaseSettings):
    """OIDC bearer-token validation settings.

    Environment variables:
        TENANCY_OIDC_ISSUER_URL: Issuer URL of the identity provider
        TENANCY_OIDC_AUDIENCE: Expected audience (default: the client id)
        TENANCY_OIDC_CLIENT_ID: OAuth2 client id (default: tenancy-ledger)
        TENANCY_OIDC_USER_ID_CLAIM: Claim holding the user id (default: sub)
        TENANCY_OIDC_USERNAME_CLAIM: Claim holding the username
        TENANCY_OIDC_ROLE_CLAIM: Claim holding the role (default: role)
        TENANCY_OIDC_DEFAULT_ROLE: Role assumed when the claim is absent
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANCY_OIDC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer_url: str = Field(
        default="http://localhost:8080/realms/tenancy",
        description="OIDC issuer URL",
    )
    client_id: str = Field(default="tenancy-ledger", description="OAuth2 client id")
    audience: str | None = Field(default=None, description="Expected audience")
    user_id_claim: str = Field(default="sub", description="User id claim")
    username_claim: str = Field(
        default="preferred_username", description="Username claim"
    )
    role_claim: str = Field(default="role", description="Role claim")
    default_role: Literal["admin", "staff", "tenant", "school", "parent"] = Field(
        default="tenant",
        description="Role assumed when the token carries no recognised role",
    )

    @property
    def effective_audience(self) -> str:
        """Audience to validate against, falling back to the client id."""
        return self.audience or self.client_id


class LedgerSettings(BaseSettings):
    """Tenancy ledger behaviour.

    Environment variables:
        TENANCY_STORAGE_BACKEND: ``sql`` (PostgreSQL) or ``memory``
        TENANCY_MAX_CONFLICT_RETRIES: Retries after a concurrent write (default: 3)
        TENANCY_RENT_GRACE_DAYS: Days after the 1st that rent falls due (default: 5)
        TENANCY_CURRENCY: ISO currency code shown with amounts (default: USD)
        TENANCY_PAYMENT_PAGE_SIZE: Payments fetched per page (default: 50)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_backend: Literal["sql", "memory"] = Field(
        default="sql", description="Repository implementation"
    )
    max_conflict_retries: int = Field(
        default=3,
        description="Retries of a unit of work after a stale write",
        ge=0,
        le=20,
    )
    rent_grace_days: int = Field(
        default=5,
        description="Days after the start of a month until rent is due",
        ge=0,
        le=27,
    )
    currency: str = Field(
        default="USD", description="Currency code", min_length=3, max_length=3
    )
    payment_page_size: int = Field(
        default=50, description="Payments fetched per page", ge=1, le=500
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Tenancy Ledger API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def ledger(self) -> LedgerSettings:
        """Get ledger settings."""
        return get_ledger_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_oidc_settings() -> OIDCSettings:
    """Get cached OIDC settings."""
    return OIDCSettings()


@lru_cache
def get_ledger_settings() -> LedgerSettings:
    """Get cached ledger settings."""
    return LedgerSettings()
