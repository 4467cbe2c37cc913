"""
File loaders for decoded plugin data.

Reads the JSON produced by an external TES3 decoder with orjson and turns
every element into a typed record.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, cast

import orjson

from .models import Cell, Header, Record, record_from_dict


class PluginLoadError(Exception):
    """Raised when a plugin file cannot be read or is not a record list."""
    pass


@dataclass
class PluginFile:
    """The ordered records of one mod file."""
    path: Path
    records: List[Record] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def header(self) -> Optional[Header]:
        for record in self.records:
            if isinstance(record, Header):
                return record
        return None

    @property
    def masters(self) -> List[str]:
        """File names of the masters listed in the header."""
        header = self.header
        if header is None:
            return []
        return [name for name, _ in header.masters if name]

    def to_json(self) -> bytes:
        """Serialize the records back to the decoder's JSON form."""
        objects: List[Dict[str, Any]] = []
        for record in self.records:
            if isinstance(record, Cell):
                objects.append(record.to_dict())
            else:
                objects.append(record.raw)
        return orjson.dumps(objects, option=orjson.OPT_INDENT_2)


class PluginFileLoader:
    """Loads decoded plugin files."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.logger.debug("PluginFileLoader initialized")

    def read_plugin(self, path: str | Path) -> PluginFile:
        """Read a decoded plugin file.

        Elements with an unknown or missing type tag, or with fields of the
        wrong type, are logged and skipped; the rest of the file is still
        loaded.

        Args:
            path: Path to the JSON file produced by the decoder

        Returns:
            PluginFile with its records in file order

        Raises:
            PluginLoadError: If the file is unreadable or not a JSON array
        """
        plugin_path = Path(path)
        try:
            with plugin_path.open("rb") as f:
                data = orjson.loads(f.read())
        except (OSError, orjson.JSONDecodeError) as e:
            raise PluginLoadError(f"Failed to load {plugin_path} ({e})") from e

        if not isinstance(data, list):
            raise PluginLoadError(
                f"Failed to load {plugin_path} (expected a list of records)"
            )

        plugin = PluginFile(plugin_path)
        skipped = 0
        for index, obj in enumerate(cast(List[Any], data)):
            if not isinstance(obj, dict):
                skipped += 1
                continue
            try:
                plugin.records.append(record_from_dict(cast(Dict[str, Any], obj)))
            except (TypeError, ValueError) as e:
                skipped += 1
                self.logger.warning(f"Skipping record {index} in {plugin_path.name}: {e}")

        self.logger.info(
            f"Loaded {len(plugin.records)} records from {plugin_path.name}"
            + (f" ({skipped} skipped)" if skipped else "")
        )
        return plugin
