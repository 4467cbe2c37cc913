"""
Settings package for tes3-validator.

Run defaults and logging configuration are stored with Qt's QSettings,
either in the platform's native store or in an INI file.

Usage:
    from tes3_validator.settings import AppSettings

    settings = AppSettings(profile="default")
    result = settings.validate()
"""

from .core import AppSettings
from .run import LoggingSettings, ValidationSettings
from .validation import ConfigError, ValidationResult

__all__ = [
    "AppSettings",
    "ConfigError",
    "LoggingSettings",
    "ValidationResult",
    "ValidationSettings",
]
