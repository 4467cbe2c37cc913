"""
Run-wide context shared by every handler.

Holds the immutable run configuration (mode and project table) and the one
mutable cross-file accumulator: the set of deprecated ids.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Set

from .data import get_deprecated_ids, get_project_data
from .plugins.models import Record, RecordType

logger = logging.getLogger(__name__)

# Models used to mark an object as deprecated; the first one is preferred
DEPRECATED_MODELS = (
    "td\\td_help_deprec_01.nif",
    "tr\\f\\tr_help_deprec_01.nif",
    "pc\\f\\pc_help_deprec_01.nif",
)


class Mode(Enum):
    """Which project's conventions a run checks against."""

    NONE = "None"
    PT = "PT"
    TD = "TD"
    TR = "TR"
    VANILLA = "Vanilla"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "Mode":
        """Parse a mode name; unknown names map to NONE."""
        for mode in cls:
            if mode.value == value:
                return mode
        return cls.NONE


@dataclass(frozen=True)
class Project:
    """An authoring project identified by its id prefix."""
    name: str
    prefix: str
    local: Optional[str] = None

    def matches(self, record_id: str) -> bool:
        return record_id.lower().startswith(self.prefix.lower())

    def has_local(self, name: str) -> bool:
        return self.local is not None and self.local.lower() == name.lower()


def load_projects() -> List[Project]:
    """Build Project objects from the packaged project table."""
    return [
        Project(
            name=str(entry.get("name", entry["prefix"])),
            prefix=entry["prefix"],
            local=entry.get("local") or None,
        )
        for entry in get_project_data()
    ]


DEPRECATABLE_TYPES = frozenset({
    RecordType.ACTIVATOR,
    RecordType.ALCHEMY,
    RecordType.APPARATUS,
    RecordType.ARMOR,
    RecordType.BODYPART,
    RecordType.BOOK,
    RecordType.CLASS,
    RecordType.CLOTHING,
    RecordType.CONTAINER,
    RecordType.CREATURE,
    RecordType.DOOR,
    RecordType.FACTION,
    RecordType.INGREDIENT,
    RecordType.LIGHT,
    RecordType.LOCKPICK,
    RecordType.MISC_ITEM,
    RecordType.NPC,
    RecordType.PROBE,
    RecordType.REPAIR_ITEM,
    RecordType.STATIC,
    RecordType.WEAPON,
})


def is_deprecated(record: Record) -> bool:
    """Return True if a record is marked deprecated by model or by name."""
    if record.type not in DEPRECATABLE_TYPES:
        return False
    if record.mesh and record.mesh.lower() in DEPRECATED_MODELS:
        return True
    return "deprecated" in record.name.lower()


@dataclass
class Context:
    """Configuration and shared state of one validation run."""
    mode: Mode = Mode.NONE
    projects: List[Project] = field(default_factory=load_projects)
    deprecated: Set[str] = field(default_factory=lambda: set(get_deprecated_ids()))

    def register_deprecated(self, records: Iterable[Record]) -> int:
        """Add the ids of deprecated records of one file.

        Must be called for a file before any of its records are dispatched.

        Args:
            records: Records of the file about to be dispatched

        Returns:
            Number of newly registered ids
        """
        added = 0
        for record in records:
            if record.deleted or not record.id:
                continue
            if is_deprecated(record):
                lower_id = record.lower_id
                if lower_id not in self.deprecated:
                    self.deprecated.add(lower_id)
                    added += 1
        if added:
            logger.debug(f"Registered {added} deprecated ids")
        return added
