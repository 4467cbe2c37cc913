"""Dead actors whose corpses would disappear."""

from ..context import Context
from ..handlers import Handler
from ..plugins.models import Actor, Record


class CorpseValidator(Handler):
    def on_record(self, context: Context, record: Record) -> None:
        # Persistent is the "corpse persists" flag on actors
        if isinstance(record, Actor) and record.is_dead and not record.persistent:
            self.report(
                f"{record.type_name} {record.id} is dead but does not have corpse persists checked"
            )
