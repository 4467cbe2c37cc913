"""
Main service for loading the plugin files of a run.

Resolves the load order (explicit masters, masters discovered from the
plugin header, then the plugin itself) and reads every file.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .loaders import PluginFile, PluginFileLoader, PluginLoadError
from .managers import RecordsManager


def _master_key(path: str | Path) -> str:
    """Normalize a master name so "Foo.esm" and "Foo.esm.json" compare equal."""
    name = Path(path).name.lower()
    if name.endswith(".json"):
        name = name[: -len(".json")]
    return name


class PluginService:
    """Service for loading a plugin together with its masters.

    Masters are optional: one that cannot be read is logged and left out,
    and the run continues with the remaining files. The target plugin must
    load.
    """

    def __init__(
        self,
        plugin_path: str | Path,
        masters: Optional[Sequence[str | Path]] = None,
        autoload_masters: bool = True,
        masters_path: Optional[str | Path] = None,
    ):
        """Initialize the plugin service.

        Args:
            plugin_path: Decoded JSON of the plugin to validate
            masters: Decoded master files to load first, in this order
            autoload_masters: Look up masters named in the plugin header
            masters_path: Extra directory to search for header masters
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.plugin_path = Path(plugin_path)
        self.masters = [Path(m) for m in masters or []]
        self.autoload_masters = autoload_masters
        self.masters_path = Path(masters_path) if masters_path else None

        self.loader = PluginFileLoader()
        self.failed: List[Path] = []

    def load(self) -> RecordsManager:
        """Load every file of the run in order.

        Returns:
            RecordsManager with masters first and the plugin last

        Raises:
            PluginLoadError: If the target plugin cannot be loaded
        """
        self.logger.info(f"Loading plugin {self.plugin_path}")
        plugin = self.loader.read_plugin(self.plugin_path)

        master_paths = list(self.masters)
        if self.autoload_masters:
            master_paths.extend(self.discover_masters(plugin))

        manager = RecordsManager()
        for master in self._load_masters(master_paths):
            manager.add_file(master)
        manager.add_file(plugin)

        self.logger.info(
            f"Loaded {len(manager.files)} files: {', '.join(manager.get_file_names())}"
        )
        return manager

    def discover_masters(self, plugin: PluginFile) -> List[Path]:
        """Find decoded files for the masters listed in the plugin header.

        Masters already supplied explicitly (by file name) are not added
        again. A header master with no file on disk is logged and skipped.
        """
        supplied = {_master_key(path) for path in self.masters}
        search_dirs = [self.plugin_path.parent]
        if self.masters_path is not None:
            search_dirs.append(self.masters_path)

        discovered: List[Path] = []
        for name in plugin.masters:
            if _master_key(name) in supplied:
                continue
            path = self._find_master(name, search_dirs)
            if path is None:
                self.logger.warning(f"Master {name} of {plugin.name} was not found")
                continue
            self.logger.debug(f"Discovered master {name} at {path}")
            discovered.append(path)
            supplied.add(_master_key(name))
        return discovered

    @staticmethod
    def _find_master(name: str, search_dirs: List[Path]) -> Optional[Path]:
        for directory in search_dirs:
            for candidate in (
                directory / f"{name}.json",
                directory / Path(name).with_suffix(".json").name,
            ):
                if candidate.is_file():
                    return candidate
        return None

    def _load_masters(self, paths: List[Path]) -> List[PluginFile]:
        """Read master files in parallel, keeping the supplied order."""
        if not paths:
            return []

        results: Dict[int, PluginFile] = {}
        with ThreadPoolExecutor(max_workers=min(8, len(paths))) as executor:
            futures = [executor.submit(self.loader.read_plugin, path) for path in paths]
            for index, future in enumerate(futures):
                try:
                    results[index] = future.result()
                except PluginLoadError as e:
                    self.failed.append(paths[index])
                    self.logger.error(f"Skipping master: {e}")

        return [results[index] for index in sorted(results)]
