"""
Settings persistence package for Advanced Random Note.

This package loads, validates and saves the plugin settings file.
"""

from .parser import (
    ConfigurationError,
    SettingsLoadResult,
    SettingsStore,
    configure_logging,
    load_settings,
    save_settings
)

__all__ = [
    'ConfigurationError',
    'SettingsLoadResult',
    'SettingsStore',
    'configure_logging',
    'load_settings',
    'save_settings'
]
