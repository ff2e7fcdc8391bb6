from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or `.env`."""

    APP_NAME: str = "Inventory API"
    APP_VERSION: str = "1.0.0"
    # "development" exposes stack traces in 500 responses
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./inventory.db"
    DB_ECHO: bool = False

    CORS_ORIGINS: List[str] = ["*"]

    # Metrics report
    LOW_STOCK_THRESHOLD: int = 10
    METRICS_TOP_N: int = 5

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
