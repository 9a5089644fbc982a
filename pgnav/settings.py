from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the pgnav terminal navigator.

    Values are loaded from environment variables and `.env`.

    Notes:
    - Saved connection profiles live in PGNAV_HOME/config.json.
    - Logs go to a rotating file; they reach stderr only in debug mode.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Profiles
    PGNAV_HOME: Path = Field(default=Path.home() / ".pgnav")

    # Provider calls are bounded by this (seconds) and fail with a timeout error.
    PGNAV_QUERY_TIMEOUT: float = Field(default=5.0, gt=0)
    PGNAV_CONNECT_TIMEOUT: int = Field(default=5, ge=1)

    # Keystroke poll interval; cancellation is noticed within one interval.
    PGNAV_POLL_INTERVAL: float = Field(default=0.1, gt=0)

    # Where a finished action returns: "root" or "parent".
    PGNAV_BOUNCE: str = Field(default="root", pattern="^(root|parent)$")

    # Logging
    PGNAV_LOG_DIR: Path | None = Field(default=None)
    PGNAV_LOG_LEVEL: str = Field(default="INFO")
    PGNAV_LOG_BACKUP_COUNT: int = Field(default=7)
    PGNAV_DEBUG: bool = Field(default=False)


def load_settings() -> Settings:
    s = Settings()
    if s.PGNAV_LOG_DIR is None:
        s.PGNAV_LOG_DIR = s.PGNAV_HOME / "logs"
    s.PGNAV_HOME.mkdir(parents=True, exist_ok=True)
    return s
