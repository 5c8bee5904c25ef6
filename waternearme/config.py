"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """App settings loaded from .env or environment. Immutable once built."""

    DATABASE_URL: str = "sqlite:///./waternearme.db"
    API_KEY: str = ""
    DISCORD_WEBHOOK_URL: str = ""
    NOTIFIER_USERNAME: str = "Bubbly"
    NOTIFIER_TIMEOUT_SECONDS: float = 5.0
    SESSION_COOKIE_NAME: str = "next-auth.session-token"
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", frozen=True, extra="ignore")


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency: overridden in tests with a purpose-built Settings."""
    return settings
