"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Find .env file
# =============================================================================

def find_env_file() -> str:
    """Find the .env file relative to project root."""
    candidates = [
        "config/.env",
        ".env",
        Path(__file__).parent.parent / "config" / ".env",
    ]

    for candidate in candidates:
        path = Path(candidate)
        if path.exists():
            return str(path)

    return "config/.env"  # Default


ENV_FILE = find_env_file()


# =============================================================================
# Settings Classes
# =============================================================================


class LedgerSettings(BaseSettings):
    """Hotel ledger and record file settings."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        env_prefix="LEDGER_",
        extra="ignore",
    )

    hotel_name: str = "Hilton"
    records_dir: str = "."
    record_suffix: str = ".txt"

    # Defaults applied to legacy "guest,room" record lines
    legacy_nights: int = Field(default=1, ge=1)
    legacy_check_in_hour: int = 15

    @field_validator("record_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError("Record suffix must not contain path separators")
        return v

    @field_validator("legacy_check_in_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("Check-in hour must be between 0 and 23")
        return v


class AppSettings(BaseSettings):
    """Application-level settings."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_format: Literal["json", "console"] = "console"


class Settings(BaseSettings):
    """Main settings container with lazy loading."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cache for sub-settings
    _ledger: LedgerSettings | None = None
    _app: AppSettings | None = None

    @property
    def ledger(self) -> LedgerSettings:
        if self._ledger is None:
            self._ledger = LedgerSettings()
        return self._ledger

    @property
    def app(self) -> AppSettings:
        if self._app is None:
            self._app = AppSettings()
        return self._app

    # Convenience accessors
    @property
    def hotel_name(self) -> str:
        return self.ledger.hotel_name

    @property
    def records_dir(self) -> Path:
        return Path(self.ledger.records_dir)

    @property
    def record_suffix(self) -> str:
        return self.ledger.record_suffix

    @property
    def log_level(self) -> str:
        return self.app.log_level

    @property
    def log_format(self) -> str:
        return self.app.log_format


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
