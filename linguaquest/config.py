"""
LinguaQuest configuration.
Loads variables from the environment / .env file.
"""

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Session signing (shared with the account subsystem)
    SECRET_KEY: SecretStr
    SESSION_MAX_AGE_SECONDS: int = 7 * 24 * 3600

    # AI provider: anthropic (default) | openai
    AI_PROVIDER: str = "anthropic"
    ANTHROPIC_KEY: SecretStr | None = None
    ANTHROPIC_MODEL: str = "claude-haiku-4-5-20251001"
    OPENAI_KEY: SecretStr | None = None
    OPENAI_MODEL: str = "gpt-4.1-mini"

    # Database URL (Railway/Render format)
    # If set, overrides PostgreSQL individual vars
    DATABASE_URL: str | None = None

    # PostgreSQL (individual vars, fallback if DATABASE_URL not set)
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "linguaquest"
    POSTGRES_USER: str = "linguaquest"
    POSTGRES_PASSWORD: SecretStr | None = None

    # Progress recording: upper bound for the whole persistence step
    DB_TIMEOUT_SECONDS: float = 10.0

    # Dashboard trailing window (days, today inclusive)
    STATS_WINDOW_DAYS: int = 7

    # Environment (development | production)
    ENVIRONMENT: str = "development"

    CORS_ORIGIN_REGEX: str = r"^https?://localhost:\d+$|^https?://127\.0\.0\.1:\d+$"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("STATS_WINDOW_DAYS")
    @classmethod
    def check_window(cls, v: int) -> int:
        if v < 1:
            raise ValueError("STATS_WINDOW_DAYS must be at least 1")
        return v

    @property
    def database_url(self) -> str:
        """
        Get database URL based on environment.

        Priority:
        1. DATABASE_URL env var (Railway/Render format)
        2. PostgreSQL individual vars (production)
        3. SQLite (development)
        """
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Railway uses postgres://, but asyncpg needs postgresql://
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql://", 1)
            return url

        if self.ENVIRONMENT == "production":
            if not self.POSTGRES_PASSWORD:
                raise ValueError("POSTGRES_PASSWORD required for production")
            return (
                f"postgresql://{self.POSTGRES_USER}:"
                f"{self.POSTGRES_PASSWORD.get_secret_value()}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        return "sqlite://db.sqlite3"


config = Settings()
