"""
Centralized Settings Configuration

Uses Pydantic Settings to load configuration from environment variables
with validation and type coercion.
"""

from pathlib import Path
from typing import Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (postgres+pool://... in production)
    database_url: str = "sqlite:///fantasy_hoops.db"

    # NBA API
    nba_season: str = "2025-26"

    # Rankings
    min_games_played: int = 5

    # Schedule data (schedule.json, weeks.json, playoffs.json)
    data_dir: Path = Path(__file__).parent.parent / "static"
    schedule_utc_offset_hours: int = -5  # fixed offset, no DST
    playoff_week_span: int = 3

    # Historical stats snapshot (read-only SQLite file)
    historical_db_url: Optional[str] = None
    historical_db_path: Path = Path("nba_historical_stats.db")
    query_cache_ttl_seconds: int = 300
    query_cache_max_entries: int = 100

    # Resilience
    retry_max_attempts: int = 3
    retry_base_delay: float = 2.0
    retry_max_delay: float = 30.0
    circuit_breaker_threshold: int = 5
    circuit_breaker_timeout: int = 60
    http_timeout: int = 30

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"
    service_name: str = "fantasy-hoops-data-platform"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Pipeline Auth
    pipeline_api_token: Optional[SecretStr] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is either json or console."""
        lower_v = v.lower()
        if lower_v not in {"json", "console"}:
            raise ValueError("log_format must be 'json' or 'console'")
        return lower_v

    @field_validator("min_games_played")
    @classmethod
    def validate_min_games(cls, v: int) -> int:
        if v < 0:
            raise ValueError("min_games_played must be >= 0")
        return v


def get_settings() -> Settings:
    """
    Get application settings.

    This function creates a new Settings instance each time,
    allowing for testing with different configurations.
    """
    return Settings()


# Default settings instance for convenience
# Import this for quick access: from core.settings import settings
settings = Settings()
