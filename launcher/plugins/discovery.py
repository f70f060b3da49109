"""Plugin discovery - scans plugin directories for descriptor files."""

import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from launcher.constants import DESCRIPTOR_SUFFIX
from launcher.plugins.manifest import read_descriptor
from launcher.plugins.registry import PluginSource, PluginState

logger = logging.getLogger(__name__)


class PluginDiscovery:
    """Discovers plugins by scanning directories for ``*.json`` descriptors."""

    def __init__(self, search_paths: Sequence[Tuple[Path, str]]):
        """Initialize discovery with search paths.

        Args:
            search_paths: (path, source_label) pairs, searched in order. The
                order decides routing precedence.
        """
        self.search_paths = search_paths

    def discover_all(self) -> List[PluginSource]:
        """Discover all plugins from the configured search paths.

        Returns:
            Discovered plugins (state=DISCOVERED) in precedence order
        """
        discovered = []

        for search_path, source in self.search_paths:
            search_path = Path(search_path)
            logger.debug(f"Checking for plugins in {search_path}")
            if not search_path.is_dir():
                logger.debug(f"Plugin search path does not exist: {search_path}")
                continue

            discovered.extend(self._scan_directory(search_path, source))

        logger.info(f"Discovered {len(discovered)} plugin(s)")
        return discovered

    def _scan_directory(self, search_path: Path, source: str) -> List[PluginSource]:
        """Load every descriptor in one directory, in name order."""
        plugins = []

        try:
            entries = sorted(search_path.iterdir())
        except OSError as e:
            logger.error(f"Error enumerating {search_path}: {e}")
            return plugins

        for entry in entries:
            if not entry.name.endswith(DESCRIPTOR_SUFFIX) or not entry.is_file():
                continue

            descriptor = read_descriptor(entry)
            if descriptor is None:
                continue

            plugins.append(
                PluginSource(
                    descriptor=descriptor,
                    path=entry,
                    source=source,
                    state=PluginState.DISCOVERED,
                )
            )
            logger.debug(f"Discovered plugin: {descriptor.name} at {entry}")

        return plugins
