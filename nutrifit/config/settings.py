"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    environment: str = "production"
    log_level: str = "INFO"
    log_file: str = "logs/nutrifit.log"

    # Referrals
    referral_expiry_days: int = Field(
        default=30, gt=0, description="Days before an unredeemed referral expires"
    )
    share_base_url: str = Field(
        default="https://dailynutrifit.app",
        description="Public base URL used in referral share links",
    )

    # Best-effort side effects (credits, achievements)
    side_effect_max_attempts: int = Field(
        default=5, gt=0, description="Dispatch attempts before an effect is marked failed"
    )
    side_effect_batch_size: int = Field(
        default=100, gt=0, description="Pending effects processed per retry run"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Only Postgres is supported."""
        if not v.startswith(("postgresql://", "postgresql+asyncpg://")):
            raise ValueError(
                "DATABASE_URL must start with postgresql:// or postgresql+asyncpg://"
            )
        return v

    @field_validator("share_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# Global settings instance
settings = Settings()
