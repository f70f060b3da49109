"""REPL state management."""

from typing import List, Optional

from launcher.plugins.protocol import Selection
from launcher.plugins.registry import PluginSource


class REPLState:
    """REPL state management."""

    def __init__(self):
        self.plugin: Optional[PluginSource] = None
        self.query: str = ""
        self.selections: List[Selection] = []

    def set_result(self, query: str, plugin: PluginSource, selections: List[Selection]):
        """Remember the plugin that answered the last query.

        Args:
            query: Query that was dispatched
            plugin: Plugin that answered it
            selections: Selections from its ``queried`` response
        """
        self.query = query
        self.plugin = plugin
        self.selections = list(selections)

    def clear_result(self, query: str):
        """Forget the last plugin after a query nobody answered."""
        self.query = query
        self.plugin = None
        self.selections = []

    def has_selection(self, selection_id: int) -> bool:
        return any(s.id == selection_id for s in self.selections)
