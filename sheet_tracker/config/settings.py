"""
Configuration Management for Sheet Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see where data lives on disk and which
reporting policies (time zone, currency symbol) are in effect.
"""

from datetime import timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA zone name to a tzinfo.

    UTC is resolved without touching the system zone database.
    """
    if name.upper() in ("UTC", "Z", "ETC/UTC"):
        return timezone.utc
    return ZoneInfo(name)


class StorageSettings(BaseSettings):
    """Local disk locations for sheet documents and exports."""

    model_config = SettingsConfigDict(
        env_prefix="SHEETS_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data/sheets"),
        description="Directory holding one JSON document per sheet"
    )
    export_dir: Path = Field(
        default=Path("data/exports"),
        description="Directory CSV exports are written to"
    )


class ReportSettings(BaseSettings):
    """Reporting policy: bucketing zone and display currency."""

    model_config = SettingsConfigDict(
        env_prefix="SHEETS_REPORT_",
        extra="ignore"
    )

    timezone: str = Field(
        default="UTC",
        description="IANA time zone used for month/year bucketing and export dates"
    )
    currency_symbol: str = Field(
        default="€",
        max_length=5,
        description="Symbol prefixed to amounts in rendered reports"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Fail at startup on an unknown zone rather than on the first report."""
        try:
            resolve_timezone(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @property
    def tzinfo(self) -> tzinfo:
        """The configured zone as a tzinfo object."""
        return resolve_timezone(self.timezone)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for emitted log events"
    )
    log_json: bool = Field(
        default=True,
        description="Render log events as JSON (False = console renderer)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Allowed: {LOG_LEVELS}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def reports(self) -> ReportSettings:
        return ReportSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, Union[bool, str]]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry describing each failure.
    """
    results: dict[str, Union[bool, str]] = {}

    settings = get_settings()

    for name in ("storage", "reports", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
