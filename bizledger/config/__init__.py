"""Configuration package."""

from bizledger.config.settings import (
    AppSettings,
    RemoteSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "RemoteSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
