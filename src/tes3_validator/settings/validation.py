"""
Checks on stored settings before a run starts.
"""

import logging
from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when the settings or the command line options cannot form a run."""
    pass


@dataclass
class ValidationResult:
    """Errors abort the run; warnings are only logged."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class SettingsValidator:
    """Validates the values of one settings profile."""

    def __init__(self, settings: "AppSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        validation = self.settings.validation

        if validation.duplicate_threshold < 0:
            result.errors.append(
                f"Duplicate threshold must not be negative: {validation.duplicate_threshold}"
            )
        if validation.min_inhabitants < 0:
            result.errors.append(
                f"Minimum inhabitants must not be negative: {validation.min_inhabitants}"
            )

        masters_path = validation.masters_path
        if masters_path is not None and not masters_path.is_dir():
            result.warnings.append(f"Masters path does not exist: {masters_path}")

        level = self.settings.logging.console_log_level
        if level not in VALID_LOG_LEVELS:
            result.warnings.append(f"Unknown console log level: {level}")

        logger.debug(
            f"Settings validated: {len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result
