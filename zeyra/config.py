"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/zeyra"

    # CQC public API
    cqc_api_key: str | None = None  # Required to run any sync
    cqc_base_url: str = "https://api.service.cqc.org.uk/public/v1"
    cqc_report_base_url: str = "https://www.cqc.org.uk/location/"
    cqc_request_delay_ms: int = 100  # Be nice to the CQC API
    cqc_timeout_seconds: float = 30.0
    maternity_activity: str = "Maternity and midwifery services"

    # Sync settings
    changes_per_page: int = 1000
    default_per_page: int = 50
    max_per_page: int = 100
    incremental_lookback_hours: int = 24
    incremental_sync_enabled: bool = True
    incremental_sync_hour: int = 3
    incremental_sync_minute: int = 0

    # Supabase auth (account deletion)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None

    # API settings
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]  # Restrict in production
    sync_rate_limit: str = "10/minute"

    # Environment
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
