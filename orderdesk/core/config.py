# orderdesk/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """OrderDesk configuration, from environment variables or `.env`.
    Centralized application settings loaded from environment.

    Every value has a local-development default, so a bare checkout
    runs against a SQLite file under ./data.

    Optional env vars (.env):
      - DATABASE_URL (any SQLAlchemy URL; SQLite and Postgres are supported)
      - DB_ECHO (log emitted SQL)
      - LOG_LEVEL
      - CORS_ORIGINS (JSON list)
      - DEFAULT_CITY (city seeded into an empty cities table; empty disables)
    """

    PROJECT_NAME: str = "OrderDesk API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite:///./data/orders.db"
    DB_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://0.0.0.0:3000",
        "http://[::1]:3000",
    ]

    # Reference data
    DEFAULT_CITY: str | None = "София"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Settings from the environment, read once per process. Tests build `Settings` directly."""
    return Settings()
