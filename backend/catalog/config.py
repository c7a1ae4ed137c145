"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Error detail is exposed in every environment except production

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Runtime environment: development | test | production
    app_env: str = "development"

    # Database
    database_url: str = (
        "postgresql+asyncpg://catalog:catalog@db:5432/catalog"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False

    # Startup
    database_connect_retries: int = 5
    database_retry_delay_seconds: float = 5.0
    # Alembic owns the schema by default; enable for local sqlite runs
    database_auto_create: bool = False

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    # API
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def expose_error_details(self) -> bool:
        return self.app_env.lower() != "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
