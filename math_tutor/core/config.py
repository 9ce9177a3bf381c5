"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI (required at startup)
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_MAX_TOKENS: int = 1000
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_TIMEOUT: float = 60.0

    # Rate limiting for /api/tutor (per client IP)
    TUTOR_RATE_LIMIT: str = "30/minute"
    RATE_LIMIT_ENABLED: bool = True

    # Lesson store
    LESSON_DEFAULT_LANGUAGE: str = "en"

    # Client-side preference file
    PREFERENCES_PATH: str = "~/.math_tutor/preferences.json"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Application
    DEBUG: bool = False
    APP_NAME: str = "AI Math Tutor API"
    APP_VERSION: str = "0.1.0"

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS_ALLOWED_ORIGINS into a list."""
        return [origin.strip() for origin in self.CORS_ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def preferences_file(self) -> Path:
        return Path(self.PREFERENCES_PATH).expanduser()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
