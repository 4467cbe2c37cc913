"""Leveled list level checks."""

from typing import Dict, List

from ..context import Context
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import LeveledList, Record


class LeveledValidator(Handler):
    """Reports lists that ignore lower levels and entries that can never resolve.

    A list's minimum level is taken from its first entry; entries are
    expected in ascending order. Lists that are not sorted are logged since
    the minimum may then be wrong.
    """

    def __init__(self, reporter: Reporter):
        super().__init__(reporter)
        self.to_check: List[LeveledList] = []
        self.minimum_levels: Dict[str, int] = {}

    def on_record(self, context: Context, record: Record) -> None:
        if not isinstance(record, LeveledList):
            return
        entries = record.entries
        if not record.all_levels and len(entries) > 1:
            first = entries[0].level
            if any(entry.level != first for entry in entries[1:]):
                self.report(f"{record.type_name} {record.id} is not calculated for all levels")
        if entries:
            self.minimum_levels[record.lower_id] = entries[0].level
            levels = [entry.level for entry in entries]
            if levels != sorted(levels):
                self.logger.warning(
                    f"{record.type_name} {record.id} is not sorted by level; "
                    f"its minimum level may be reported incorrectly"
                )
        self.to_check.append(record)

    def on_end(self, context: Context) -> None:
        for record in self.to_check:
            for entry in record.entries:
                minimum = self.minimum_levels.get(entry.id.lower())
                if minimum is not None and minimum > entry.level:
                    self.report(
                        f"{record.type_name} {record.id} contains {entry.id} at level "
                        f"{entry.level} which will not resolve to anything at that level"
                    )
