"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nextrep.services.calendar import (
    DEFAULT_WEEK_START,
    TRAILING_MONTH_DAYS,
    TRAILING_WEEK_DAYS,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    spoonacular_api_key: str | None = None
    spoonacular_base_url: str = "https://api.spoonacular.com"
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    overpass_timeout_seconds: int = 30
    week_start_day: int = DEFAULT_WEEK_START
    trailing_week_days: int = TRAILING_WEEK_DAYS
    trailing_month_days: int = TRAILING_MONTH_DAYS
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
