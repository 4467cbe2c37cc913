"""
Handler protocol and registry.

Every validator is a Handler: it overrides the hooks it needs and keeps its
own state. The registry owns all active handlers of a run and forwards each
hook call to them in registration order.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence

from .context import Context
from .diagnostics import Reporter
from .plugins.models import (
    Actor,
    Cell,
    Dialogue,
    DialogueInfo,
    InventoryEntry,
    LeveledEntry,
    Record,
    Reference,
)

if TYPE_CHECKING:
    from .settings import AppSettings


class Handler:
    """Base class for validators; every hook is a no-op by default."""

    def __init__(self, reporter: Reporter):
        self.reporter = reporter
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def report(self, message: str) -> None:
        self.reporter.report(message)

    def on_record(self, context: Context, record: Record) -> None:
        pass

    def on_cellref(
        self,
        context: Context,
        cell: Cell,
        reference: Reference,
        lower_id: str,
        refs: Sequence[Reference],
        index: int,
    ) -> None:
        pass

    def on_actor(self, context: Context, actor: Actor) -> None:
        pass

    def on_leveled(self, context: Context, record: Record, entry: LeveledEntry) -> None:
        pass

    def on_inventory(self, context: Context, record: Record, entry: InventoryEntry) -> None:
        pass

    def on_info(self, context: Context, info: DialogueInfo, topic: Dialogue) -> None:
        pass

    def on_scriptline(
        self,
        context: Context,
        record: Record,
        code: str,
        comment: str,
        topic: Dialogue,
    ) -> None:
        pass

    def on_end(self, context: Context) -> None:
        pass


class HandlerRegistry:
    """Ordered collection of the handlers of one run."""

    def __init__(self, handlers: Optional[List[Handler]] = None):
        self.handlers: List[Handler] = list(handlers or [])

    def add(self, handler: Handler) -> None:
        self.handlers.append(handler)

    def __iter__(self) -> Iterator[Handler]:
        return iter(self.handlers)

    def __len__(self) -> int:
        return len(self.handlers)

    def on_record(self, context: Context, record: Record) -> None:
        for handler in self.handlers:
            handler.on_record(context, record)

    def on_cellref(
        self,
        context: Context,
        cell: Cell,
        reference: Reference,
        lower_id: str,
        refs: Sequence[Reference],
        index: int,
    ) -> None:
        for handler in self.handlers:
            handler.on_cellref(context, cell, reference, lower_id, refs, index)

    def on_actor(self, context: Context, actor: Actor) -> None:
        for handler in self.handlers:
            handler.on_actor(context, actor)

    def on_leveled(self, context: Context, record: Record, entry: LeveledEntry) -> None:
        for handler in self.handlers:
            handler.on_leveled(context, record, entry)

    def on_inventory(self, context: Context, record: Record, entry: InventoryEntry) -> None:
        for handler in self.handlers:
            handler.on_inventory(context, record, entry)

    def on_info(self, context: Context, info: DialogueInfo, topic: Dialogue) -> None:
        for handler in self.handlers:
            handler.on_info(context, info, topic)

    def on_scriptline(
        self,
        context: Context,
        record: Record,
        code: str,
        comment: str,
        topic: Dialogue,
    ) -> None:
        for handler in self.handlers:
            handler.on_scriptline(context, record, code, comment, topic)

    def on_end(self, context: Context) -> None:
        for handler in self.handlers:
            handler.on_end(context)


@dataclass
class RunOptions:
    """Options that decide which handlers are registered."""
    extended: bool = False
    names: bool = False
    min_inhabitants: int = 3
    duplicate_threshold: float = 0.0

    @classmethod
    def from_settings(cls, settings: "AppSettings") -> "RunOptions":
        return cls(
            min_inhabitants=settings.validation.min_inhabitants,
            duplicate_threshold=settings.validation.duplicate_threshold,
        )


def build_registry(context: Context, options: RunOptions, reporter: Reporter) -> HandlerRegistry:
    """Create the handlers for a run.

    Without --extended or --names the single-plugin validators run; otherwise
    only the multi-file handlers selected by those options do. Validators
    that depend on the mode check it themselves.

    Raises:
        DataError: If a packaged data table is malformed
        re.error: If a pattern fails to compile
    """
    from .extended.cells import CellValidator
    from .extended.deprecated import DeprecationValidator
    from .extended.missing import MissingValidator
    from .extended.names import NameValidator
    from .validators.bodyparts import BodyPartRules
    from .validators.corpse import CorpseValidator
    from .validators.duplicates import DuplicateRefValidator
    from .validators.leveled import LeveledValidator
    from .validators.npc import NpcValidator
    from .validators.orphans import OrphanValidator
    from .validators.persistent import PersistentValidator
    from .validators.references import ReferenceValidator
    from .validators.scripts import ScriptValidator
    from .validators.travel import TravelValidator
    from .validators.uniques import UniquesValidator

    logger = logging.getLogger(__name__)
    registry = HandlerRegistry()

    if options.extended or options.names:
        if options.extended:
            registry.add(CellValidator(reporter, options.min_inhabitants))
            registry.add(DeprecationValidator(reporter))
            registry.add(MissingValidator(reporter))
        if options.names:
            registry.add(NameValidator(reporter))
        logger.debug(f"Registered {len(registry)} multi-file handlers")
        return registry

    rules = BodyPartRules.from_data()
    unique_heads = rules.unique_heads()

    registry.add(CorpseValidator(reporter))
    registry.add(DuplicateRefValidator(reporter, options.duplicate_threshold))
    registry.add(LeveledValidator(reporter))
    registry.add(NpcValidator(reporter, rules))
    registry.add(OrphanValidator(reporter))
    registry.add(PersistentValidator(reporter))
    registry.add(ReferenceValidator(reporter))
    registry.add(ScriptValidator(reporter, context))
    registry.add(TravelValidator(reporter))
    registry.add(UniquesValidator(reporter, unique_heads))
    logger.debug(f"Registered {len(registry)} handlers")
    return registry
