"""
Packcheck configuration.
"""

from .settings import (
    DEFAULT_SETTINGS,
    PackcheckSettings,
    SettingsError,
    load_settings,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "PackcheckSettings",
    "SettingsError",
    "load_settings",
]
