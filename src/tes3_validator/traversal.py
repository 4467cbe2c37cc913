"""
Record traversal and hook dispatch.

A run accumulates every file in load order and then finalizes once.
Accumulating a file dispatches ``on_record`` for each of its records.
Finalizing walks the last file only, so every check sees the copy of a
record that overrides earlier files, and derives the typed sub-events
(actors, cell references, inventory and leveled entries, dialogue
responses and script lines) before calling ``on_end``.
"""

import logging
from typing import Iterable, Iterator, NamedTuple, Optional

from .context import Context
from .handlers import HandlerRegistry
from .plugins.loaders import PluginFile
from .plugins.managers import RecordsManager
from .plugins.models import (
    Actor,
    Cell,
    Container,
    Dialogue,
    DialogueInfo,
    LeveledList,
    Record,
    RecordType,
    Script,
)


class TraversalError(Exception):
    """Raised when the accumulate/finalize protocol is used out of order."""
    pass


# Record kinds that never reach a handler
SKIPPED_TYPES = frozenset({
    RecordType.HEADER,
    RecordType.LANDSCAPE,
    RecordType.LANDSCAPE_TEXTURE,
    RecordType.SKILL,
})


class ScriptLine(NamedTuple):
    code: str
    comment: str


def iter_script(text: str) -> Iterator[ScriptLine]:
    """Split script text into (code, comment) lines.

    Each line is split on its first ``;`` and both halves are trimmed. A
    line is skipped only when both halves are empty. Case is preserved.
    """
    for line in text.split("\n"):
        code, _, comment = line.partition(";")
        code = code.strip()
        comment = comment.strip()
        if code or comment:
            yield ScriptLine(code, comment)


class Traversal:
    """Drives handlers over the records of a run."""

    def __init__(self, context: Context, registry: HandlerRegistry):
        self.context = context
        self.registry = registry
        self.manager = RecordsManager()
        self.finalized = False
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def accumulate(self, plugin: PluginFile) -> None:
        """Dispatch ``on_record`` for every record of one file.

        Deprecated ids of the file are registered on the context first.

        Raises:
            TraversalError: If the run has already been finalized
        """
        if self.finalized:
            raise TraversalError(f"Cannot accumulate {plugin.name} after finalize")
        self.context.register_deprecated(plugin.records)
        self.manager.add_file(plugin)
        self.logger.info(f"Accumulating {plugin.name} ({len(plugin.records)} records)")
        for record in plugin.records:
            if record.type in SKIPPED_TYPES:
                continue
            self.registry.on_record(self.context, record)

    def finalize(self) -> None:
        """Dispatch the sub-events of the last file, then ``on_end``.

        Raises:
            TraversalError: If no file was accumulated or finalize ran already
        """
        if self.finalized:
            raise TraversalError("Traversal has already been finalized")
        plugin = self.manager.last_file
        if plugin is None:
            raise TraversalError("Nothing to finalize: no file was accumulated")
        self.finalized = True

        self.logger.info(f"Finalizing {plugin.name}")
        dummy = Dialogue(RecordType.DIALOGUE)
        current_topic = dummy
        for record in plugin.records:
            if isinstance(record, Cell):
                self._dispatch_cell(record)
            elif isinstance(record, Container):
                if isinstance(record, Actor):
                    self.registry.on_actor(self.context, record)
                for entry in record.inventory:
                    self.registry.on_inventory(self.context, record, entry)
            elif isinstance(record, LeveledList):
                for leveled_entry in record.entries:
                    self.registry.on_leveled(self.context, record, leveled_entry)
            elif isinstance(record, Dialogue):
                current_topic = record
            elif isinstance(record, DialogueInfo):
                self.registry.on_info(self.context, record, current_topic)
                self._dispatch_script(record, record.script_text, current_topic)
            elif isinstance(record, Script):
                self._dispatch_script(record, record.text, dummy)

        self.registry.on_end(self.context)

    def _dispatch_cell(self, cell: Cell) -> None:
        refs = cell.references
        for index, reference in enumerate(refs):
            self.registry.on_cellref(
                self.context, cell, reference, reference.lower_id, refs, index
            )

    def _dispatch_script(self, record: Record, text: str, topic: Dialogue) -> None:
        for line in iter_script(text):
            self.registry.on_scriptline(self.context, record, line.code, line.comment, topic)


def validate(
    plugin: PluginFile,
    context: Context,
    registry: HandlerRegistry,
    masters: Optional[Iterable[PluginFile]] = None,
) -> Traversal:
    """Run a complete traversal: masters, then the plugin, then finalize."""
    traversal = Traversal(context, registry)
    for master in masters or []:
        traversal.accumulate(master)
    traversal.accumulate(plugin)
    traversal.finalize()
    return traversal
