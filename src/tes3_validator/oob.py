"""
Out-of-bounds reference relocation.

Exterior references whose position lies in a neighbouring cell are moved
into that cell when the file defines it. All moves are collected first and
applied afterwards, so no cell is modified while cells are being scanned.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, cast

from .diagnostics import Reporter
from .plugins.loaders import PluginFile
from .plugins.models import Cell, get_cell_grid

logger = logging.getLogger(__name__)

Grid = Tuple[int, int]


@dataclass(frozen=True)
class Move:
    source: Grid
    target: Grid
    key: Tuple[int, int]
    id: str


def collect_moves(plugin: PluginFile, reporter: Reporter) -> List[Move]:
    """Find references that belong to an adjacent cell of the same file."""
    exteriors: Dict[Grid, Cell] = {
        record.grid: record
        for record in plugin.records
        if isinstance(record, Cell) and record.is_exterior
    }
    moves: List[Move] = []
    for grid, cell in exteriors.items():
        for reference in cell.references:
            if reference.deleted or reference.moved_cell is not None:
                continue
            x, y, _ = reference.translation
            actual = get_cell_grid(x, y)
            dx = abs(grid[0] - actual[0])
            dy = abs(grid[1] - actual[1])
            if dx == 0 and dy == 0:
                continue
            if dx > 1 or dy > 1:
                reporter.report(
                    f"Not moving {reference.id} {reference.key} from cell {grid} "
                    f"as cell {actual} is too far away"
                )
                continue
            if actual not in exteriors:
                reporter.report(
                    f"Not moving {reference.id} {reference.key} from cell {grid} "
                    f"as cell {actual} is not in this file"
                )
                continue
            reporter.report(f"Moving {reference.id} {reference.key} from {grid} to {actual}")
            moves.append(Move(grid, actual, reference.key, reference.id))
    return moves


def apply_moves(plugin: PluginFile, moves: List[Move]) -> int:
    """Move references between cells; returns how many were moved."""
    index_by_grid: Dict[Grid, int] = {
        record.grid: index
        for index, record in enumerate(plugin.records)
        if isinstance(record, Cell) and record.is_exterior
    }
    moved = 0
    for move in moves:
        source = cast(Cell, plugin.records[index_by_grid[move.source]])
        target = cast(Cell, plugin.records[index_by_grid[move.target]])
        for position, reference in enumerate(source.references):
            if reference.key == move.key:
                target.references.append(source.references.pop(position))
                moved += 1
                break
    return moved


def fix_out_of_bounds(plugin: PluginFile, output: str | Path, reporter: Reporter) -> int:
    """Relocate out-of-bounds references and write the edited file.

    Returns:
        Number of references moved
    """
    moves = collect_moves(plugin, reporter)
    moved = apply_moves(plugin, moves)
    output_path = Path(output)
    output_path.write_bytes(plugin.to_json())
    logger.info(f"Moved {moved} references; wrote {output_path}")
    return moved
