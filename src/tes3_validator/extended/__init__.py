"""
Multi-file handlers.

These run with --extended or --names over masters and the plugin. They
collect definitions from every file and check only the plugin's content.
"""

from .cells import CellValidator
from .deprecated import DeprecationValidator
from .missing import MissingValidator
from .names import NameValidator

__all__ = [
    "CellValidator",
    "DeprecationValidator",
    "MissingValidator",
    "NameValidator",
]
