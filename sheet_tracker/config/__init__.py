"""Configuration package."""

from sheet_tracker.config.settings import (
    AppSettings,
    ReportSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ReportSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
