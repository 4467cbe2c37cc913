"""Duplicate placement detection."""

from typing import Sequence

from ..context import Context
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import Cell, Reference, Vector3


def _format_vector(vector: Vector3) -> str:
    return "[" + ", ".join(f"{value:g}" for value in vector) + "]"


class DuplicateRefValidator(Handler):
    """Reports references placed twice in the same cell.

    Two references are duplicates when their ids, rotations and scales are
    equal and their positions are equal or, with a non-zero threshold,
    within that squared distance of each other.
    """

    def __init__(self, reporter: Reporter, threshold: float = 0.0):
        super().__init__(reporter)
        self.threshold = max(threshold, 0.0)

    def on_cellref(
        self,
        context: Context,
        cell: Cell,
        reference: Reference,
        lower_id: str,
        refs: Sequence[Reference],
        index: int,
    ) -> None:
        if reference.deleted:
            return
        scale = reference.scale if reference.scale is not None else 1.0
        for other in refs[index + 1:]:
            if other.deleted:
                continue
            other_scale = other.scale if other.scale is not None else 1.0
            if (
                other.lower_id == lower_id
                and reference.rotation == other.rotation
                and scale == other_scale
                and self.is_close(reference.translation, other.translation)
            ):
                self.report(
                    f"Cell {cell.display_name} contains duplicate reference {reference.id} "
                    f"at position {_format_vector(reference.translation)} "
                    f"{_format_vector(other.translation)}"
                )

    def is_close(self, a: Vector3, b: Vector3) -> bool:
        if self.threshold == 0:
            return a == b
        distance = sum((x - y) * (x - y) for x, y in zip(a, b))
        return distance <= self.threshold
