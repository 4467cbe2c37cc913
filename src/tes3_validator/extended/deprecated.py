"""
Deprecated object usage.

Objects are deprecated by their model or by having "deprecated" in their
name; the context gathers their ids from every file before dispatch. This
handler reports deprecated objects that use the wrong marker model and
every reference to a deprecated id from the plugin being validated.
"""

import re
from typing import Dict, Optional, Pattern

from ..context import DEPRECATED_MODELS, Context
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import (
    Actor,
    Cell,
    Dialogue,
    DialogueInfo,
    InventoryEntry,
    LeveledEntry,
    Record,
    Reference,
    Script,
)


class DeprecationValidator(Handler):
    def __init__(self, reporter: Reporter):
        super().__init__(reporter)
        self.regex_cache: Dict[str, Pattern[str]] = {}
        # Scripts already reported, so a script is named once
        self.reported_scripts: set[str] = set()

    def on_record(self, context: Context, record: Record) -> None:
        if record.deleted:
            return
        if record.mesh and record.mesh.lower() in DEPRECATED_MODELS[1:]:
            self.report(f"{record.type_name} {record.id} is not using model {DEPRECATED_MODELS[0]}")

    def on_cellref(self, context: Context, cell: Cell, reference: Reference, lower_id: str, refs, index) -> None:
        if reference.deleted:
            return
        if lower_id in context.deprecated:
            self.report(f"{cell.type_name} {cell.display_name} references {reference.id}")
        for value in (reference.owner, reference.owner_faction, reference.soul):
            if value:
                self.check(context, f"{cell.type_name} {cell.display_name}", value)

    def on_inventory(self, context: Context, record: Record, entry: InventoryEntry) -> None:
        self.check(context, f"{record.type_name} {record.id}", entry.id)

    def on_leveled(self, context: Context, record: Record, entry: LeveledEntry) -> None:
        self.check(context, f"{record.type_name} {record.id}", entry.id)

    def on_info(self, context: Context, info: DialogueInfo, topic: Dialogue) -> None:
        label = f"{info.type_name} {info.id} in topic {topic.id}"
        for value in (info.speaker_id, info.speaker_class, info.speaker_faction):
            if value:
                self.check(context, label, value)
        for info_filter in info.filters:
            if info_filter.id:
                self.check(context, label, info_filter.id)

    def on_scriptline(self, context: Context, record: Record, code: str, comment: str, topic: Dialogue) -> None:
        if not code or not context.deprecated:
            return
        if isinstance(record, DialogueInfo):
            label = f"{record.type_name} {record.id} in topic {topic.id}"
        elif isinstance(record, Script):
            label = f"{record.type_name} {record.id}"
        else:
            return
        key = f"{record.type_name}:{record.lower_id}:{topic.lower_id}"
        if key in self.reported_scripts:
            return
        found = self.find_in_line(context, code)
        if found is not None:
            self.reported_scripts.add(key)
            self.report(f"{label} references {found}")

    def check(self, context: Context, label: str, value: str) -> None:
        if value.lower() in context.deprecated:
            self.report(f"{label} references {value}")

    def find_in_line(self, context: Context, line: str) -> Optional[str]:
        """Return the first deprecated id used as a word in a script line."""
        lower = line.lower()
        for deprecated_id in sorted(context.deprecated):
            if deprecated_id not in lower:
                continue
            pattern = self.regex_cache.get(deprecated_id)
            if pattern is None:
                pattern = re.compile(rf'[ ,"]{re.escape(deprecated_id)}($|[ ,"])', re.IGNORECASE)
                self.regex_cache[deprecated_id] = pattern
            if pattern.search(line):
                return deprecated_id
        return None

    def on_actor(self, context: Context, actor: Actor) -> None:
        if actor.deleted:
            return
        label = f"{actor.type_name} {actor.id}"
        for value in (actor.class_id, actor.faction):
            if value:
                self.check(context, label, value)
