"""Configuration for the lab-api service loaded from environment variables."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Lab API configuration.

    Every field can be overridden from the environment or a ``.env`` file.
    The DEFAULT_* fields fill in request parameters the caller leaves out.
    """

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    MARKET_DATA_INTERVAL: str = "1d"  # bar interval for every core calculation

    DEFAULT_LOOKBACK: int = 252
    DEFAULT_WINDOW: int = 21
    DEFAULT_HORIZON: int = 10
    DEFAULT_CONFIDENCE: int = 99
    DEFAULT_PORTFOLIO_VALUE: float = 100_000.0
    EWMA_LAMBDA: float = 0.94

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
