"""Persistent objects placed more than once."""

from typing import Dict

from ..context import Context
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import Cell, Record, RecordType, Reference


class PersistentValidator(Handler):
    def __init__(self, reporter: Reporter):
        super().__init__(reporter)
        self.counts: Dict[str, int] = {}

    def on_record(self, context: Context, record: Record) -> None:
        if record.persistent and record.type not in (RecordType.CREATURE, RecordType.NPC):
            self.counts[record.lower_id] = 0

    def on_cellref(self, context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        if reference.deleted or lower_id not in self.counts:
            return
        self.counts[lower_id] += 1
        if self.counts[lower_id] > 1:
            self.report(f"Persistent object {reference.id} is used multiple times")
            del self.counts[lower_id]
