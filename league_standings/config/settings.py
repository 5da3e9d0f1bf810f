import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        None, description="URL for the Supabase project."
    )
    supabase_key: Optional[str] = Field(
        None, description="Anon key for the Supabase project."
    )
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key for Supabase (use with caution!)."
    )

    # League Configuration (used when league_seasons has no row for a year)
    default_playoff_teams: int = Field(
        8, gt=0, description="Playoff slots when the season row does not say."
    )
    regular_season_weeks: Optional[int] = Field(
        13, gt=0, description="Last week of the regular season (inclusive)."
    )
    qualifying_round_week: Optional[int] = Field(
        14,
        gt=0,
        description="Week of the play-in round where group leaders have a bye.",
    )

    # Data fetching
    fetch_retry_attempts: int = Field(
        4, ge=1, description="Total attempts for a Supabase select (1 = no retry)."
    )

    # Export
    report_output_dir: str = Field(
        ".", description="Directory the CLI writes report files into."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def supabase_api_key(self) -> Optional[str]:
        """Key used for reads: the service key when present, else the anon key."""
        return self.supabase_service_key or self.supabase_key


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
