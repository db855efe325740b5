"""Configuration package."""

from finance_monitor.config.settings import (
    AppSettings,
    Settings,
    StorageSettings,
    first_settings_error,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "StorageSettings",
    "first_settings_error",
    "get_settings",
    "validate_all_settings",
]
