"""
Environment configuration — single source of truth for all settings.

Uses pydantic-settings for type-safe config with .env file support.
All values have sensible defaults for local development.

Usage:
    from groundwater.core.config import settings
    print(settings.FORECAST_HISTORY_DAYS)
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables or .env file.

    Precedence: env var > .env file > default value
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ──
    APP_NAME: str = "Groundwater Level Monitoring"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"  # DEBUG | INFO | WARNING | ERROR | CRITICAL

    # ── CORS ──
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    CORS_ALLOW_ALL: bool = True  # False in production

    # ── Forecasting ──
    FORECAST_HISTORY_DAYS: int = 90
    FORECAST_MIN_POINTS: int = 5
    FORECAST_SHORT_HISTORY_POINTS: int = 30
    FORECAST_SHORT_HISTORY_PENALTY: float = 0.8
    FORECAST_CONFIDENCE_CAP: float = 95.0
    FORECAST_TREND_DEADBAND_M: float = 0.5  # metres of predicted change
    FORECAST_MAX_HORIZON_DAYS: int = 365
    SIMULATION_HORIZON_DAYS: int = 30

    # ── Time series / dashboard ──
    DASHBOARD_TREND_DAYS: int = 30
    TIMESERIES_DEFAULT_LOOKBACK_DAYS: int = 30
    TIMESERIES_PAGE_LIMIT: int = 1000
    STATION_PAGE_LIMIT: int = 50

    # ── Demo data ──
    SEED_SAMPLE_DATA: bool = True
    SAMPLE_STATION_COUNT: int = 24
    SAMPLE_HISTORY_DAYS: int = 30
    SAMPLE_SEED: int = 42

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
