"""
Module for working with decoded TES3 plugin files.

Provides the typed record model, a loader for the JSON produced by an
external decoder, and a service that assembles masters and the plugin into
a single load order.
"""

from .service import PluginService
from .models import (
    CELL_SIZE,
    Actor,
    Cell,
    Container,
    Dialogue,
    DialogueInfo,
    Header,
    InventoryEntry,
    LeveledEntry,
    LeveledList,
    PathGrid,
    Record,
    RecordType,
    Reference,
    Script,
    TravelDestination,
    get_cell_grid,
    get_cell_name,
    record_from_dict,
)
from .managers import RecordsManager
from .loaders import PluginFile, PluginFileLoader, PluginLoadError

# Public exports
__all__ = [
    # Main service
    "PluginService",
    # Records
    "Record",
    "RecordType",
    "Actor",
    "Cell",
    "Container",
    "Dialogue",
    "DialogueInfo",
    "Header",
    "InventoryEntry",
    "LeveledEntry",
    "LeveledList",
    "PathGrid",
    "Reference",
    "Script",
    "TravelDestination",
    "record_from_dict",
    # Helpers
    "CELL_SIZE",
    "get_cell_grid",
    "get_cell_name",
    # Component classes
    "RecordsManager",
    "PluginFile",
    "PluginFileLoader",
    "PluginLoadError",
]
