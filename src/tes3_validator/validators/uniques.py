"""References to unique items and NPCs."""

import re
from typing import AbstractSet, Dict, List, Optional, Pattern

from ..context import Context
from ..data import get_uniques
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import (
    Cell,
    Dialogue,
    DialogueInfo,
    InventoryEntry,
    LeveledEntry,
    Record,
    Reference,
    Script,
)

CREATE_FUNCTIONS = (
    r"placeatme|addtolevcreature|addtolevitem|addsoulgem|addspell|cast|explodespell|"
    r"dropsoulgem|additem|equip|drop|placeatpc|placeitem|placeitemcell"
)


class UniquesValidator(Handler):
    """Reports unique objects that are placed, listed, carried or created.

    The unique set is the packaged table plus the ids of NPCs bound to a
    unique head by the body-part rules.
    """

    def __init__(self, reporter: Reporter, unique_heads: AbstractSet[str] = frozenset(),
                 uniques: Optional[AbstractSet[str]] = None):
        super().__init__(reporter)
        base = get_uniques() if uniques is None else uniques
        self.uniques: List[str] = sorted({u.lower() for u in base} | set(unique_heads))
        self.unique_set = frozenset(self.uniques)
        self.create_func = re.compile(CREATE_FUNCTIONS, re.IGNORECASE)
        self.regex_cache: Dict[str, Pattern[str]] = {}

    def on_record(self, context: Context, record: Record) -> None:
        if record.enchanting:
            self.check(record, record.enchanting)

    def on_cellref(self, context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        if lower_id in self.unique_set:
            self.report(f"{cell.type_name} {cell.id} references {reference.id}")

    def on_leveled(self, context: Context, record: Record, entry: LeveledEntry) -> None:
        self.check(record, entry.id)

    def on_inventory(self, context: Context, record: Record, entry: InventoryEntry) -> None:
        self.check(record, entry.id)

    def on_scriptline(self, context: Context, record: Record, code: str, comment: str, topic: Dialogue) -> None:
        if not code or not self.create_func.search(code):
            return
        lower = code.lower()
        for unique in self.uniques:
            if unique in lower and self._matches(unique, code):
                if isinstance(record, DialogueInfo):
                    self.report(f"{record.type_name} {record.id} in topic {topic.id} references {unique}")
                elif isinstance(record, Script):
                    self.report(f"{record.type_name} {record.id} references {unique}")
                break

    def check(self, record: Record, value: str) -> None:
        if value.lower() in self.unique_set:
            self.report(f"{record.type_name} {record.id} references {value}")

    def _matches(self, unique: str, line: str) -> bool:
        pattern = self.regex_cache.get(unique)
        if pattern is None:
            pattern = re.compile(rf'[ ,"]{re.escape(unique)}($|[ ,"])', re.IGNORECASE)
            self.regex_cache[unique] = pattern
        return bool(pattern.search(line))
