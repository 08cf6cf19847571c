import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

# fantacalcio.it identifies seasons with integers starting from 10
DEFAULT_SEASON_IDS: Dict[str, str] = {
    "2015-16": "10",
    "2016-17": "11",
    "2017-18": "12",
    "2018-19": "13",
    "2019-20": "14",
    "2020-21": "15",
    "2021-22": "16",
    "2022-23": "17",
}

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Remote service
    base_url: str = Field(
        "https://www.fantacalcio.it/api/v1", description="Root of the fantacalcio.it API."
    )
    username: Optional[str] = Field(None, description="Login username.")
    password: Optional[str] = Field(None, description="Login password (prompted if unset).")
    season_ids: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_SEASON_IDS),
        description="Season string (e.g. 2022-23) to remote season identifier.",
    )

    # HTTP behaviour
    http_timeout: float = Field(30.0, gt=0, description="Request timeout in seconds.")
    fetch_attempts: int = Field(
        3, ge=1, description="Attempts for a spreadsheet download hitting transient errors."
    )

    # Folders and files
    cache_dir: Path = Field(Path("tmp"), description="Folder for downloaded xlsx files.")
    out_dir: Path = Field(Path("out"), description="Folder for converted JSON files.")
    cookie_file: Path = Field(Path("cookie.txt"), description="Authentication cookie cache.")
    use_cookie_cache: bool = Field(True, description="Reuse the cookie saved by a previous login.")

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_file: Optional[Path] = Field(None, description="Optional file receiving log messages.")

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_prefix="FANTAVOTI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings(**overrides) -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings(**overrides)
    except ValidationError as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")

    log_level_upper = settings.log_level.upper()
    # Validate log_level even if loaded from .env
    if log_level_upper not in VALID_LOG_LEVELS:
        logging.warning(
            f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
        )
        settings.log_level = "INFO"
    else:
        settings.log_level = log_level_upper
    return settings
