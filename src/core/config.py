"""Configuration management for hearthboard."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/hearthboard.db", description="Path to the SQLite database file")

    # Session Configuration
    secret_key: str | None = Field(default=None, description="Secret key used to sign family bearer tokens")
    token_max_age_seconds: int = Field(
        default=7 * 24 * 3600, description="Lifetime of a family bearer token (in seconds)"
    )
    password_hash_iterations: int = Field(
        default=390_000, description="PBKDF2 iterations used when hashing family passwords"
    )

    # Statistics Configuration
    stats_timezone: str | None = Field(
        default=None,
        description="IANA time zone used for history buckets (server local time when unset)",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    environment: str = Field(default="development", description="Deployment environment name")

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment.lower() == "production"

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # Authentication
    TOKEN_SALT: str = "family-session"
    BEARER_PREFIX: str = "Bearer"

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100  # Page size used when scanning a whole collection

    # Collections
    FAMILIES_COLLECTION: str = "families"
    TASKS_COLLECTION: str = "tasks"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
