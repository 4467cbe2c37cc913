"""Tests for out-of-bounds reference relocation."""

from pathlib import Path
from typing import cast

from conftest import exterior, interior, plugin, ref
from tes3_validator.oob import apply_moves, collect_moves, fix_out_of_bounds
from tes3_validator.plugins import Cell, PluginFileLoader
from tes3_validator.plugins.models import CELL_SIZE


def make_plugin():
    return plugin([
        exterior((0, 0), [
            ref("stone", (10, 10, 0), refr_index=1),
            ref("rock", (CELL_SIZE + 10, 10, 0), refr_index=2),
            ref("tree", (3 * CELL_SIZE, 10, 0), refr_index=3),
            ref("bush", (-10, 10, 0), refr_index=4),
        ]),
        exterior((1, 0), [ref("grass", (CELL_SIZE + 50, 50, 0), refr_index=5)]),
        interior("Cave", [ref("rock", (CELL_SIZE * 5, 0, 0), refr_index=6)]),
    ])


class TestCollectMoves:
    """Test which references are moved."""

    def test_moves_and_reasons(self, reporter) -> None:
        """Test that only references in an adjacent cell of the file move."""
        moves = collect_moves(make_plugin(), reporter)

        assert [(move.id, move.source, move.target) for move in moves] == [("rock", (0, 0), (1, 0))]
        assert reporter.lines == [
            "Moving rock (0, 2) from (0, 0) to (1, 0)",
            "Not moving tree (0, 3) from cell (0, 0) as cell (3, 0) is too far away",
            "Not moving bush (0, 4) from cell (0, 0) as cell (-1, 0) is not in this file",
        ]

    def test_apply(self, reporter) -> None:
        """Test that applying moves edits both cells."""
        mod = make_plugin()
        moved = apply_moves(mod, collect_moves(mod, reporter))

        source = cast(Cell, mod.records[0])
        target = cast(Cell, mod.records[1])
        assert moved == 1
        assert [r.id for r in source.references] == ["stone", "tree", "bush"]
        assert [r.id for r in target.references] == ["grass", "rock"]


class TestFixOutOfBounds:
    """Test writing the relocated plugin."""

    def test_output_file(self, reporter, tmp_path: Path) -> None:
        """Test that the written file holds the moved reference."""
        output = tmp_path / "fixed.json"
        assert fix_out_of_bounds(make_plugin(), output, reporter) == 1

        written = PluginFileLoader().read_plugin(output)
        cells = [record for record in written.records if isinstance(record, Cell)]
        assert [r.id for r in cells[1].references] == ["grass", "rock"]
        assert cells[1].references[1].translation == (CELL_SIZE + 10.0, 10.0, 0.0)
