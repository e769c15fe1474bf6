# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required in production (.env):
      - JWT_SECRET (HS256 signing secret for bearer tokens)
      - DATABASE_URL (SQLAlchemy URL; defaults to a local SQLite file)

    Optional:
      - ENVIRONMENT ("development" | "production"); controls whether
        unexpected error messages are echoed back in 500 responses.
      - SEED_CATALOG (insert the sample paint catalog on empty DB)
    """

    PROJECT_NAME: str = "Paint Shop Storefront API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"

    # DB config
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DB_ECHO: bool = False
    SEED_CATALOG: bool = True

    # Bearer token signing
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Registration rules
    PASSWORD_MIN_LENGTH: int = 6

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
