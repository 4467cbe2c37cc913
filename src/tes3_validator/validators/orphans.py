"""
Unused content detection.

Reports scripts that are never started, enchantments no item carries,
objects that are never placed, listed, carried or created by a script, and
journal indices that no script ever reaches.
"""

import re
from collections import defaultdict
from typing import Dict, Optional, Set

from ..context import Context, Mode
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import (
    Cell,
    Dialogue,
    DialogueInfo,
    InventoryEntry,
    LeveledEntry,
    Record,
    RecordType,
    Reference,
)

# Objects that must be used somewhere; actors and leveled lists are not tracked
PLACEABLE_TYPES = frozenset({
    RecordType.ACTIVATOR,
    RecordType.ALCHEMY,
    RecordType.APPARATUS,
    RecordType.ARMOR,
    RecordType.BOOK,
    RecordType.CLOTHING,
    RecordType.CONTAINER,
    RecordType.DOOR,
    RecordType.INGREDIENT,
    RecordType.LIGHT,
    RecordType.LOCKPICK,
    RecordType.MISC_ITEM,
    RecordType.PROBE,
    RecordType.REPAIR_ITEM,
    RecordType.STATIC,
    RecordType.WEAPON,
})

# Records whose script field starts the script
SCRIPTED_TYPES = PLACEABLE_TYPES | {
    RecordType.CREATURE,
    RecordType.NPC,
    RecordType.START_SCRIPT,
}

ENCHANTABLE_TYPES = frozenset({
    RecordType.ARMOR,
    RecordType.BOOK,
    RecordType.CLOTHING,
    RecordType.WEAPON,
})

_PREFIX = r'^([,\s]*|.*?->[,\s]*)'

START_SCRIPT = _PREFIX + r'startscript[,\s]+("[^"]+"|[^,\s]+)[,\s]*$'
FIRST_ARG = (
    _PREFIX
    + r'(placeatme|addsoulgem|additem|equip|drop|placeatpc|placeitemcell|placeitem)[,\s]+'
    + r'(?:("[^"]+"?)(?:.*)|([^,\s"]+)(?:[,\s]+|$))'
)
JOURNAL = _PREFIX + r'(journal|setjournalindex)[,\s]+(?:("[^"]+"?)|([^,\s"]+))[,\s]+([\d]+)'
SECOND_ARG = (
    _PREFIX
    + r'(addtolevcreature|addtolevitem)[,\s]+("[^"]+"|[^,\s]+)[,\s]+("[^"]+"|[^,\s]+)([,\s]+|$)'
)


def _unquote(value: str) -> str:
    return value.replace('"', "").lower()


class OrphanValidator(Handler):
    """Finds declared content that nothing refers to."""

    def __init__(self, reporter: Reporter):
        super().__init__(reporter)
        self.scripts: Dict[str, str] = {}
        self.started_scripts: Set[str] = set()
        self.objects: Dict[str, Record] = {}
        self.used_objects: Set[str] = set()
        self.enchantments: Dict[str, str] = {}
        self.used_enchantments: Set[str] = set()
        self.journals: Dict[str, Dialogue] = {}
        self.journal_indices: Dict[str, Set[int]] = defaultdict(set)
        self.used_journals: Dict[str, Set[int]] = defaultdict(set)

        self.startscript = re.compile(START_SCRIPT, re.IGNORECASE)
        self.firstarg = re.compile(FIRST_ARG, re.IGNORECASE)
        self.journal = re.compile(JOURNAL, re.IGNORECASE)
        self.secondarg = re.compile(SECOND_ARG, re.IGNORECASE)

    def on_record(self, context: Context, record: Record) -> None:
        if context.mode == Mode.TD or record.deleted:
            return
        record_type = record.type
        if isinstance(record, Dialogue):
            if record.is_journal:
                self.journals[record.lower_id] = record
        elif record_type == RecordType.ENCHANTING:
            self.enchantments[record.lower_id] = record.id
        elif record_type == RecordType.SCRIPT:
            self.scripts[record.lower_id] = record.id
        if record_type in SCRIPTED_TYPES and record.script:
            self.started_scripts.add(record.script.lower())
        if record_type in PLACEABLE_TYPES:
            self.objects[record.lower_id] = record
        if record_type in ENCHANTABLE_TYPES and record.enchanting:
            self.used_enchantments.add(record.enchanting.lower())

    def on_info(self, context: Context, info: DialogueInfo, topic: Dialogue) -> None:
        if context.mode == Mode.TD:
            return
        if topic.is_journal and not info.is_quest_name:
            self.journal_indices[topic.lower_id].add(info.journal_index)

    def on_cellref(self, context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        self.used_objects.add(lower_id)

    def on_leveled(self, context: Context, record: Record, entry: LeveledEntry) -> None:
        self.used_objects.add(entry.id.lower())

    def on_inventory(self, context: Context, record: Record, entry: InventoryEntry) -> None:
        self.used_objects.add(entry.id.lower())

    def on_scriptline(self, context, record, code: str, comment: str, topic) -> None:
        if not code or context.mode == Mode.TD:
            return
        match = self.startscript.match(code)
        if match:
            self.started_scripts.add(_unquote(match.group(2)))
            return
        match = self.firstarg.match(code)
        if match:
            used = match.group(3) or match.group(4)
            if used:
                self.used_objects.add(_unquote(used))
            return
        match = self.journal.match(code)
        if match:
            topic_id: Optional[str] = match.group(3) or match.group(4)
            if topic_id:
                self.used_journals[_unquote(topic_id)].add(int(match.group(5)))
            return
        match = self.secondarg.match(code)
        if match:
            self.used_objects.add(_unquote(match.group(4)))

    def on_end(self, context: Context) -> None:
        if context.mode == Mode.TD:
            return
        for lower_id, script_id in self.scripts.items():
            if lower_id not in self.started_scripts:
                self.report(f"Script {script_id} is never started")
        for lower_id, enchantment_id in self.enchantments.items():
            if lower_id not in self.used_enchantments:
                self.report(f"Enchantment {enchantment_id} is not used")
        for lower_id, record in self.objects.items():
            if lower_id not in self.used_objects:
                self.report(f"{record.type_name} {record.id} is not used")
        for lower_id, journal in self.journals.items():
            if lower_id not in self.used_journals:
                self.report(f"Journal {journal.id} is not used")
                continue
            reached = self.used_journals[lower_id]
            for index in sorted(self.journal_indices.get(lower_id, ())):
                if index not in reached:
                    self.report(f"Journal index {index} in {journal.id} is unused")
