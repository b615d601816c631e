"""Configuration package."""

from fintrack.config.settings import (
    AppSettings,
    LedgerSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "LedgerSettings",
    "Settings",
    "get_settings",
]
