"""
Stored defaults for validation runs and their logging.

Values live under the profile group of the settings store. Command line
options override them for a single run; logging options are edited in the
settings file directly.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

LOG_FILE_PATH = "logs/tes3_validator.csv"


class SettingsGroup:
    """Typed reads from one key prefix of a QSettings store.

    INI files hand every value back as a string, so each getter converts
    and falls back to its default when the stored text does not parse.
    """

    prefix = ""

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _value(self, key: str, default: Any) -> Any:
        return self.settings.value(f"{self.prefix}/{key}", default)

    def _set(self, key: str, value: Any) -> None:
        self.settings.setValue(f"{self.prefix}/{key}", value)
        self.settings.sync()

    def _get_str(self, key: str, default: str) -> str:
        value = self._value(key, default)
        return str(value) if value is not None else default

    def _get_bool(self, key: str, default: bool) -> bool:
        value = self._value(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value) if value is not None else default

    def _get_int(self, key: str, default: int) -> int:
        value = self._value(key, default)
        try:
            return int(str(value)) if value is not None else default
        except ValueError:
            logger.warning(f"Invalid integer for {self.prefix}/{key}: {value}, using {default}")
            return default

    def _get_float(self, key: str, default: float) -> float:
        value = self._value(key, default)
        try:
            return float(str(value)) if value is not None else default
        except ValueError:
            logger.warning(f"Invalid number for {self.prefix}/{key}: {value}, using {default}")
            return default


class ValidationSettings(SettingsGroup):
    """Defaults for the checks and for master loading."""

    prefix = "validation"

    @property
    def duplicate_threshold(self) -> float:
        """Squared distance under which two equal references are duplicates."""
        return self._get_float("duplicate_threshold", 0.0)

    @duplicate_threshold.setter
    def duplicate_threshold(self, value: float) -> None:
        if value < 0:
            logger.warning(f"Ignoring negative duplicate threshold {value}")
            return
        self._set("duplicate_threshold", value)

    @property
    def min_inhabitants(self) -> int:
        """Living actors an interior needs before it is not reported as empty."""
        return self._get_int("min_inhabitants", 3)

    @min_inhabitants.setter
    def min_inhabitants(self, value: int) -> None:
        if value < 0:
            logger.warning(f"Ignoring negative minimum inhabitants {value}")
            return
        self._set("min_inhabitants", value)

    @property
    def autoload_masters(self) -> bool:
        """Whether masters named in the plugin header are looked up."""
        return self._get_bool("autoload_masters", True)

    @autoload_masters.setter
    def autoload_masters(self, value: bool) -> None:
        self._set("autoload_masters", value)

    @property
    def masters_path(self) -> Optional[Path]:
        """Extra directory searched for header masters."""
        value = self._value("masters_path", "")
        return Path(str(value)) if value else None

    @masters_path.setter
    def masters_path(self, value: Optional[Path]) -> None:
        if value is None:
            self.settings.remove(f"{self.prefix}/masters_path")
            self.settings.sync()
        else:
            self._set("masters_path", str(value))


class LoggingSettings(SettingsGroup):
    """Where log records go. Findings are printed regardless of these."""

    prefix = "logging"

    @property
    def console_logging(self) -> bool:
        return self._get_bool("console_enabled", True)

    @property
    def console_log_level(self) -> str:
        return self._get_str("console_level", "WARNING").upper()

    @property
    def console_use_colors(self) -> bool:
        return self._get_bool("console_use_colors", True)

    @property
    def file_logging(self) -> bool:
        return self._get_bool("file_enabled", False)

    @property
    def log_file_path(self) -> Path:
        return Path(self._get_str("file_path", LOG_FILE_PATH))
