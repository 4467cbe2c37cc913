"""
Similar NPC names.

Every NPC name is compared against the names of the NPCs loaded before it.
A name matches when its edit distance to an earlier, different name is at
most len(name) / 7 (rounded). The comparison is all-pairs, so it is split
across a thread pool; each NPC reports its earliest match, which keeps the
output independent of scheduling.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from rapidfuzz.distance import Levenshtein

from ..context import Context
from ..diagnostics import Reporter
from ..handlers import Handler
from ..plugins.models import Actor, Record, RecordType

DISTANCE_DIV = 7.0


def get_max_distance(name: str) -> int:
    """Return the largest edit distance that counts as similar (halves round up)."""
    return int(math.floor(len(name) / DISTANCE_DIV + 0.5))


@dataclass
class NpcName:
    id: str
    name: str
    lower: str


class NameValidator(Handler):
    def __init__(self, reporter: Reporter, max_workers: Optional[int] = None):
        super().__init__(reporter)
        self.max_workers = max_workers
        self.names: Dict[str, NpcName] = {}

    def on_record(self, context: Context, record: Record) -> None:
        if not isinstance(record, Actor) or record.type != RecordType.NPC or record.deleted:
            return
        if not record.name:
            return
        entry = self.names.get(record.lower_id)
        if entry is None:
            self.names[record.lower_id] = NpcName(record.id, record.name, record.name.lower())
        else:
            entry.name = record.name
            entry.lower = record.name.lower()

    def find_match(self, entries: List[NpcName], index: int) -> Optional[Tuple[NpcName, int]]:
        """Return the earliest earlier entry similar to entries[index]."""
        entry = entries[index]
        max_distance = get_max_distance(entry.name)
        if max_distance < 1:
            return None
        for other in entries[:index]:
            if other.lower == entry.lower:
                continue
            # Length difference is a lower bound on the distance
            if abs(len(other.lower) - len(entry.lower)) > max_distance:
                continue
            distance = Levenshtein.distance(entry.lower, other.lower, score_cutoff=max_distance)
            if distance <= max_distance:
                return other, distance
        return None

    def on_end(self, context: Context) -> None:
        entries = list(self.names.values())
        if not entries:
            return
        self.logger.info(f"Comparing {len(entries)} NPC names")
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            matches = list(executor.map(lambda i: self.find_match(entries, i), range(len(entries))))
        for entry, match in zip(entries, matches):
            if match is None:
                continue
            other, distance = match
            self.report(
                f"Npc {entry.id} ({entry.name}) has a name similar to "
                f"{other.id} ({other.name}) {distance}"
            )
