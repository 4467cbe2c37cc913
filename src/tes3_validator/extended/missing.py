"""Dangling references: ids that no loaded file defines."""

from typing import Dict, Optional, Set

from ..context import Context
from ..data import get_broken_data
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import Cell, InventoryEntry, LeveledEntry, Record, Reference


class MissingValidator(Handler):
    """Reports placements and list entries whose id resolves to nothing.

    Ids in the broken reference table are reported by the reference
    validator instead and are ignored here.
    """

    def __init__(self, reporter: Reporter, broken: Optional[Dict[str, str]] = None):
        super().__init__(reporter)
        self.known: Set[str] = set()
        self.broken = get_broken_data() if broken is None else broken

    def on_record(self, context: Context, record: Record) -> None:
        if record.id and not record.deleted:
            self.known.add(record.lower_id)

    def is_missing(self, lower_id: str) -> bool:
        return bool(lower_id) and lower_id not in self.known and lower_id not in self.broken

    def on_cellref(self, context: Context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        if not reference.deleted and self.is_missing(lower_id):
            self.report(f"Cell {cell.display_name} references missing object {reference.id}")

    def on_inventory(self, context: Context, record: Record, entry: InventoryEntry) -> None:
        if self.is_missing(entry.id.lower()):
            self.report(f"{record.type_name} {record.id} contains missing object {entry.id}")

    def on_leveled(self, context: Context, record: Record, entry: LeveledEntry) -> None:
        if self.is_missing(entry.id.lower()):
            self.report(f"{record.type_name} {record.id} contains missing object {entry.id}")
