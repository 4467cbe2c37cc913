"""
Travel service consistency.

Every actor offering travel (a caravaner) should be reachable from each of
its destinations: some other caravaner placed at the destination must offer
a route back to where the first one stands, with the same class when the
first one has a class. Caravaners should also answer the "Destination"
topic and name each town they travel to in those answers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..context import Context
from ..data import get_travel_classes
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import (
    Actor,
    Cell,
    Dialogue,
    DialogueInfo,
    Record,
    Reference,
    TravelDestination,
    get_cell_grid,
    get_cell_name,
)

DESTINATION_TOPIC = "destination"


def get_town_name(cell_id: str) -> str:
    """Return the part of a cell id before the first comma."""
    return cell_id.split(",", 1)[0]


def location_matches(cell: Cell, destination: TravelDestination) -> bool:
    """Return True if a destination leads into (or next to) a cell."""
    if cell.is_interior:
        if destination.cell is None:
            return False
        return cell.id.lower() == destination.cell.lower()
    x, y, _ = destination.translation
    grid_x, grid_y = get_cell_grid(x, y)
    cell_x, cell_y = cell.grid
    return abs(grid_x - cell_x) <= 1 and abs(grid_y - cell_y) <= 1


@dataclass
class Caravaner:
    record: Actor
    cells: List[Cell] = field(default_factory=list)
    responses: List[DialogueInfo] = field(default_factory=list)

    def is_counterpart(self, cell: Cell) -> bool:
        """Return True if this caravaner travels to the given cell."""
        return any(location_matches(cell, d) for d in self.record.travel_destinations)

    def is_placed_at(self, destination: TravelDestination) -> bool:
        return any(location_matches(cell, destination) for cell in self.cells)

    def matches_class(self, class_id: str) -> bool:
        return self.record.class_id is not None and self.record.class_id.lower() == class_id.lower()


class TravelValidator(Handler):
    """Checks that travel services are symmetric and announced."""

    def __init__(self, reporter: Reporter, classes: Optional[Set[str]] = None):
        super().__init__(reporter)
        self.classes = classes if classes is not None else set(get_travel_classes())
        self.cells: Dict[Tuple[int, int], Cell] = {}
        self.caravaners: Dict[str, Caravaner] = {}

    def on_record(self, context: Context, record: Record) -> None:
        if isinstance(record, Cell):
            if record.is_exterior:
                self.cells[record.grid] = record
            return
        if not isinstance(record, Actor) or record.is_dead:
            return
        if record.travel_destinations:
            self.caravaners[record.lower_id] = Caravaner(record)
        elif record.class_id and record.class_id.lower() in self.classes:
            self.report(
                f"Npc {record.id} has class {record.class_id} but does not offer travel services"
            )

    def on_cellref(self, context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        if reference.deleted:
            return
        caravaner = self.caravaners.get(lower_id)
        if caravaner is not None:
            caravaner.cells.append(cell)

    def on_info(self, context: Context, info: DialogueInfo, topic: Dialogue) -> None:
        if not info.speaker_id or topic.lower_id != DESTINATION_TOPIC:
            return
        caravaner = self.caravaners.get(info.speaker_id.lower())
        if caravaner is not None:
            caravaner.responses.append(info)

    def on_end(self, context: Context) -> None:
        for caravaner in self.caravaners.values():
            self.check_caravaner(caravaner)

    def check_caravaner(self, caravaner: Caravaner) -> None:
        record = caravaner.record
        prefix = f"{record.type_name} {record.id}"
        if not caravaner.responses:
            self.report(
                f"{prefix} offers travel services but does not have a reply to the destination topic"
            )

        for cell in caravaner.cells:
            counterparts = [
                other for other in self.caravaners.values()
                if other is not caravaner and other.is_counterpart(cell)
            ]
            for destination in record.travel_destinations:
                return_services = [c for c in counterparts if c.is_placed_at(destination)]
                dest_name, _ = self.get_destination_name(destination)
                if not return_services:
                    self.report(
                        f"{prefix} in {get_cell_name(cell)} offers travel to {dest_name} "
                        f"but there is no return travel there"
                    )
                elif record.class_id is not None and not any(
                    c.matches_class(record.class_id) for c in return_services
                ):
                    self.report(
                        f"{prefix} in {get_cell_name(cell)} offers {record.class_id} travel to "
                        f"{dest_name} but there is no corresponding return travel there"
                    )

        if not caravaner.responses:
            return
        checked: Set[str] = set()
        for destination in record.travel_destinations:
            _, town = self.get_destination_name(destination)
            if not town or town in checked:
                continue
            checked.add(town)
            if not any(town in info.text for info in caravaner.responses):
                self.report(f"{prefix} does not mention {town} in their destination response")

    def get_destination_name(self, destination: TravelDestination) -> Tuple[str, str]:
        """Return a readable destination name and its town name (may be empty)."""
        if destination.cell is not None:
            return destination.cell, get_town_name(destination.cell)
        x, y, _ = destination.translation
        cell = self.cells.get(get_cell_grid(x, y))
        if cell is not None:
            return get_cell_name(cell), get_town_name(cell.id)
        return f"[{x:g}, {y:g}]", ""
