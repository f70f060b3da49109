"""Plugin registry - ordered list of running plugins and the query router."""
from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from launcher.plugins.channel import ProcessChannel
from launcher.plugins.manifest import PluginDescriptor

logger = logging.getLogger(__name__)


class PluginState(str, Enum):
    """Plugin lifecycle states."""

    DISCOVERED = "discovered"
    STARTED = "started"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class PluginSource:
    """A plugin found on disk and, once started, its live process."""

    descriptor: PluginDescriptor
    path: Path  # descriptor file
    source: str  # "system" | "local"
    state: PluginState = PluginState.DISCOVERED
    pattern: Optional[re.Pattern] = field(default=None, repr=False)
    channel: Optional[ProcessChannel] = field(default=None, repr=False)
    error: Optional[str] = None
    # Serializes request/response exchanges on the channel
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    # A fill owed for a `complete` nobody has listened for yet
    awaiting_reply: bool = field(default=False, repr=False)
    held_reply: Optional[str] = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.descriptor.name or self.path.stem

    @property
    def directory(self) -> Path:
        return self.path.parent

    def matches(self, query: str) -> bool:
        return self.pattern is not None and self.pattern.search(query) is not None

    def to_dict(self) -> dict:
        """Serialize the plugin for display."""
        return {
            "name": self.name,
            "description": self.descriptor.description,
            "pattern": self.descriptor.pattern,
            "exec": self.descriptor.exec,
            "icon": self.descriptor.icon,
            "source": self.source,
            "path": str(self.path),
            "state": self.state.value,
            "pid": self.channel.pid if self.channel else None,
            "error": self.error,
        }


class PluginRegistry:
    """Registered plugins in registration order.

    The order is the routing precedence: the first plugin whose pattern
    matches a query handles it. Filled once at startup, read-only afterwards.
    """

    def __init__(self):
        self._plugins: List[PluginSource] = []

    def register(self, plugin: PluginSource) -> None:
        """Append a started plugin."""
        if any(p.name == plugin.name for p in self._plugins):
            logger.warning(
                f"Plugin name '{plugin.name}' already registered, "
                f"{plugin.path} only receives queries the earlier one does not match"
            )
        self._plugins.append(plugin)
        logger.info(f"Registered plugin: {plugin.name} ({plugin.source})")

    def match(self, query: str) -> Optional[PluginSource]:
        """Return the first plugin whose pattern matches anywhere in the query."""
        for plugin in self._plugins:
            if plugin.matches(query):
                return plugin
        return None

    def get(self, name: str) -> Optional[PluginSource]:
        """Get the first registered plugin with this name."""
        return next((p for p in self._plugins if p.name == name), None)

    def get_all(self) -> List[PluginSource]:
        """Get all registered plugins in routing order."""
        return list(self._plugins)

    def count(self) -> int:
        """Get total number of registered plugins."""
        return len(self._plugins)
