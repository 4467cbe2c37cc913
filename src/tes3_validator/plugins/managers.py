"""
Managers for indexing decoded plugin records.

Provides RecordsManager which keeps files in load order and a merged index
where a record from a later file replaces the same record from an earlier one.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from .loaders import PluginFile
from .models import Record, RecordType

RecordKey = Tuple[RecordType, str]


class RecordsManager:
    """Manager for load-ordered plugin files and their merged records.

    Maintains two indices:
    - records_by_key: (type, lowercase id) -> winning record across all files
    - types_by_id: lowercase id -> types it is defined as (any file)
    """

    def __init__(self):
        self.files: List[PluginFile] = []
        self.records_by_key: Dict[RecordKey, Record] = {}
        self.types_by_id: Dict[str, set[RecordType]] = defaultdict(set)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.logger.debug("RecordsManager initialized")

    def add_file(self, plugin: PluginFile) -> None:
        """Append a file to the load order and merge its records.

        Args:
            plugin: Loaded plugin file; later calls take priority
        """
        self.files.append(plugin)
        overridden = 0
        for record in plugin.records:
            if record.type == RecordType.HEADER:
                continue
            key = (record.type, record.lower_id)
            if key in self.records_by_key:
                overridden += 1
            self.records_by_key[key] = record
            self.types_by_id[record.lower_id].add(record.type)
        self.logger.debug(
            f"Merged {plugin.name}: {len(plugin.records)} records, {overridden} overrides"
        )

    @property
    def last_file(self) -> Optional[PluginFile]:
        """Return the file loaded last (the one being validated)."""
        return self.files[-1] if self.files else None

    def get_record(self, record_type: RecordType, record_id: str) -> Optional[Record]:
        """Return the winning record of a type by case-insensitive id."""
        return self.records_by_key.get((record_type, record_id.lower()))

    def has_id(self, record_id: str) -> bool:
        """Return True if any loaded file defines a record with this id."""
        return record_id.lower() in self.types_by_id

    def get_records_by_type(self, record_type: RecordType) -> List[Record]:
        """Return the winning records of one type in merge order."""
        return [
            record for (rtype, _), record in self.records_by_key.items()
            if rtype == record_type
        ]

    def get_file_names(self) -> List[str]:
        """Return a copy of the loaded file names in load order."""
        return [plugin.name for plugin in self.files]
