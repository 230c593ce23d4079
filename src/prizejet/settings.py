"""Application settings and configuration."""

import sys

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_JWT_DEFAULTS = {"change-me-in-production", "secret", "your_jwt_secret_key_here_at_least_32_characters"}


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PRIZEJET_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "prizejet"
    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "console"  # console or json
    allowed_origins: str = "http://localhost:3000"
    public_base_url: str = "http://localhost:3000"

    # JWT
    jwt_secret_key: str = "change-me-in-production"
    jwt_expire_hours: int = 2

    # Database
    database_url: str = "sqlite:///./prizejet.db"

    # Referral codes and slugs
    referral_code_length: int = 8
    referral_code_attempts: int = 10
    slug_suffix_length: int = 5

    # Dashboard analytics
    stats_days: int = 14
    top_referrers_limit: int = 5
    leaderboard_limit: int = 20
    default_timezone: str = "UTC"

    # Rate Limiting
    entry_rate_limit: str = "20/minute"

    # Integrations
    webhook_timeout_seconds: float = 5.0


# Global settings instance
settings = Settings()

# ── Security validation ──────────────────────────────────────────────
if settings.env == "production":
    if settings.jwt_secret_key in _INSECURE_JWT_DEFAULTS or len(settings.jwt_secret_key) < 32:
        print(
            "\n❌  FATAL: PRIZEJET_JWT_SECRET_KEY is insecure or too short (min 32 chars).\n"
            "   Set a strong random value:  openssl rand -hex 32\n",
            file=sys.stderr,
        )
        sys.exit(1)
