"""
Circuit Challenge - Engine Configuration

Настройки генератора и API через environment variables.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache
from typing import Literal


LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Настройки приложения."""

    # App
    APP_NAME: str = "Circuit Challenge"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"
    ENVIRONMENT: Literal["development", "production"] = "development"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_GENERATE: int = 60

    # Generation
    GENERATION_MAX_ATTEMPTS: int = 30
    GENERATION_MAX_ATTEMPTS_CAP: int = 100
    PATH_MAX_ATTEMPTS: int = 200
    EXPRESSION_MAX_TRIES: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator(
        "GENERATION_MAX_ATTEMPTS",
        "GENERATION_MAX_ATTEMPTS_CAP",
        "PATH_MAX_ATTEMPTS",
        "EXPRESSION_MAX_TRIES",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"attempt caps must be positive, got: {value}")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got: {value}")
        return level

    @property
    def cors_origins_list(self) -> list[str]:
        """Парсит CORS_ORIGINS в список."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Получить настройки (кэшируется)."""
    return Settings()


settings = get_settings()
