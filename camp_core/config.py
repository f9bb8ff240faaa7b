"""Configuration management using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    JWT_SECRET_KEY has no default: the process refuses to start without it.
    """

    database_path: str = "./data/camp.db"
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # JWT Configuration
    # One secret signs every token kind (access, refresh, invite, reset)
    jwt_secret_key: str = Field(min_length=16)
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 8
    refresh_token_expire_days: int = 7
    reset_token_expire_minutes: int = 60
    # None disables expiry on invite tokens
    invite_token_expire_days: int | None = 30

    # Bcrypt work factor (higher = more secure but slower)
    # For tests, use 4 for faster execution while maintaining functionality
    bcrypt_work_factor: int = Field(default=12, ge=4, le=31)

    # Maximum entries accepted by a single bulk invite request
    bulk_invite_limit: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )


def get_settings() -> Settings:
    """Load settings from the environment.

    Raises:
        pydantic.ValidationError: If required values (JWT_SECRET_KEY) are missing
    """
    return Settings()
