"""Placement checks for cell references: bounds and known broken ids."""

import math
from typing import Dict, Optional

from ..context import Context
from ..data import get_broken_data
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import CELL_SIZE, Cell, Reference, get_cell_grid

MAX_Z = 64000.0
MIN_Z = -32000.0
MAX_SAFE_INT = 9007199254740991.0


def is_far_out(reference: Reference) -> bool:
    """Return True for positions the game cannot place sensibly."""
    if any(not math.isfinite(c) or abs(c) > MAX_SAFE_INT for c in reference.translation):
        return True
    return not MIN_Z <= reference.translation[2] <= MAX_Z


def is_out_of_bounds(cell: Cell, reference: Reference) -> bool:
    """Return True if an exterior reference lies outside its cell's grid square."""
    x, y, _ = reference.translation
    x_bound = CELL_SIZE * cell.grid[0]
    y_bound = CELL_SIZE * cell.grid[1]
    return x < x_bound or y < y_bound or x >= x_bound + CELL_SIZE or y >= y_bound + CELL_SIZE


class ReferenceValidator(Handler):
    def __init__(self, reporter: Reporter, broken: Optional[Dict[str, str]] = None):
        super().__init__(reporter)
        self.broken = get_broken_data() if broken is None else broken

    def on_cellref(self, context: Context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        name = cell.display_name
        if not reference.deleted and cell.is_exterior:
            x, y, z = reference.translation
            if is_far_out(reference):
                self.report(
                    f"Cell {name} contains far out reference {reference.id} at [{x:g}, {y:g}, {z:g}]"
                )
            elif is_out_of_bounds(cell, reference):
                actual_x, actual_y = get_cell_grid(x, y)
                self.report(
                    f"Cell {name} contains out of bounds reference {reference.id} "
                    f"at [{x:g}, {y:g}, {z:g}] which should be in ({actual_x}, {actual_y})"
                )
        replacement = self.broken.get(lower_id)
        if replacement is None:
            return
        if replacement:
            self.report(
                f"Cell {name} contains broken reference {reference.id} which should be {replacement}"
            )
        else:
            self.report(f"Cell {name} contains broken reference {reference.id}")
