"""
Settings profiles backed by QSettings.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QSettings

from .. import __version__
from .run import LoggingSettings, ValidationSettings
from .validation import SettingsValidator, ValidationResult

logger = logging.getLogger(__name__)

ORGANIZATION = "tes3_validator"
APPLICATION = "tes3_validator"


class AppSettings:
    """
    One settings profile of the validator.

    The profile is a group in the platform's native store, or in an INI file
    when one is given. Run defaults are under ``validation`` and log output
    options under ``logging``.
    """

    def __init__(
        self,
        profile: str = "default",
        settings_file: Optional[Union[str, Path]] = None,
    ):
        """Open a profile, creating it on first use.

        Args:
            profile: Settings profile name (default: "default")
            settings_file: Optional INI file to use instead of the native store
        """
        if settings_file is not None:
            self.settings = QSettings(str(settings_file), QSettings.Format.IniFormat)
        else:
            self.settings = QSettings(ORGANIZATION, APPLICATION)
        self.profile = profile
        self.settings.beginGroup(profile)

        self._validator = SettingsValidator(self)
        self._logging = LoggingSettings(self.settings)
        self._validation = ValidationSettings(self.settings)

        self._stamp_version()

        logger.debug(
            f"Settings initialized for profile '{profile}', stored at: {self.settings.fileName()}"
        )

    def _stamp_version(self) -> None:
        """Record which release wrote the profile."""
        stored = str(self.settings.value("app/version", "") or "")
        if not stored:
            logger.debug(f"New settings profile '{self.profile}'")
        elif stored != __version__:
            logger.info(f"Settings profile '{self.profile}' was written by version {stored}")
        else:
            return
        self.settings.setValue("app/version", __version__)
        self.settings.sync()

    @property
    def logging(self) -> LoggingSettings:
        return self._logging

    @property
    def validation(self) -> ValidationSettings:
        return self._validation

    @property
    def version(self) -> str:
        """Release that last wrote this profile."""
        return str(self.settings.value("app/version", __version__))

    def validate(self) -> ValidationResult:
        return self._validator.validate()

    def get_settings_file_path(self) -> str:
        return self.settings.fileName()

    def reset_to_defaults(self) -> None:
        """Remove every stored value of this profile."""
        logger.warning(f"Resetting settings profile '{self.profile}' to defaults")
        self.settings.remove("")
        self.settings.sync()
        self._stamp_version()
