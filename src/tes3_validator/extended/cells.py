"""Interior cell population and path grid checks across all loaded files."""

from typing import Dict, Set, Tuple

from ..context import Context
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import Actor, Cell, PathGrid, Record, RecordType, Reference

# Cells with this prefix are asset test cells
EXEMPT_PREFIX = "T_"


class CellValidator(Handler):
    """Reports sparsely inhabited interiors and interiors without a path grid.

    Inhabitants and path grids are collected from every file; only the
    cells of the plugin being validated are checked.
    """

    def __init__(self, reporter: Reporter, min_inhabitants: int = 3):
        super().__init__(reporter)
        self.min_inhabitants = min_inhabitants
        self.inhabitants: Set[str] = set()
        self.pathgrids: Set[str] = set()
        self.cells: Dict[str, Tuple[Cell, int]] = {}

    def on_record(self, context: Context, record: Record) -> None:
        if record.deleted:
            return
        if isinstance(record, PathGrid):
            if record.cell:
                self.pathgrids.add(record.cell.lower())
        elif record.type == RecordType.LEVELED_CREATURE:
            self.inhabitants.add(record.lower_id)
        elif isinstance(record, Actor) and not record.is_dead:
            self.inhabitants.add(record.lower_id)

    def on_cellref(self, context: Context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        if not cell.is_interior or len(refs) <= 1 or cell.id.startswith(EXEMPT_PREFIX):
            return
        key = cell.lower_id
        _, count = self.cells.get(key, (cell, 0))
        if not reference.deleted and lower_id in self.inhabitants:
            count += 1
        self.cells[key] = (cell, count)

    def on_end(self, context: Context) -> None:
        for key, (cell, count) in self.cells.items():
            if not cell.resting_is_illegal and count < self.min_inhabitants:
                self.report(f"Cell {cell.display_name} contains {count} NPCs or creatures")
            if key not in self.pathgrids:
                self.report(f"Cell {cell.display_name} is missing a path grid")
