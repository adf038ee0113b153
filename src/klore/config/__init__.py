"""Configuration management for klore."""

from .settings import (
    DEFAULT_SETTINGS,
    KloreSettings,
    discover_settings_path,
    get_settings,
    load_settings,
    save_settings,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "KloreSettings",
    "discover_settings_path",
    "get_settings",
    "load_settings",
    "save_settings",
]
