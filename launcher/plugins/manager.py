"""Launcher service - the single entry point the search UI talks to."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from launcher.constants import RESPONSE_TIMEOUT, SHUTDOWN_GRACE, default_search_paths
from launcher.plugins.discovery import PluginDiscovery
from launcher.plugins.lifecycle import PluginLifecycle
from launcher.plugins.protocol import (
    CompleteEvent,
    QueryEvent,
    Response,
    SubmitEvent,
    decode,
    encode,
)
from launcher.plugins.registry import PluginRegistry, PluginSource, PluginState

logger = logging.getLogger(__name__)


class LauncherService:
    """Top-level plugin host.

    Discovers and starts plugins, routes queries to them and shuts them down.
    Every call that expects a reply holds the plugin's exchange lock, so a
    channel never has more than one request in flight. A ``complete`` whose
    fill has not been listened for yet is settled before the next request.
    """

    def __init__(
        self,
        search_paths: Optional[Sequence[Tuple[Path, str]]] = None,
        registry: Optional[PluginRegistry] = None,
        response_timeout: Optional[float] = RESPONSE_TIMEOUT,
        shutdown_grace: float = SHUTDOWN_GRACE,
        env: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            search_paths: (path, source_label) pairs; defaults to the system
                directory followed by the local directory
            registry: Pre-built registry, mostly for tests
            response_timeout: Seconds to wait for a reply; None waits forever
            shutdown_grace: Seconds a plugin gets to exit after ``quit``
            env: Environment for spawned plugins
        """
        if search_paths is None:
            search_paths = default_search_paths()

        self.registry = registry if registry is not None else PluginRegistry()
        self.discovery = PluginDiscovery(search_paths)
        self.lifecycle = PluginLifecycle(env=env)
        self.response_timeout = response_timeout
        self.shutdown_grace = shutdown_grace

    def __enter__(self) -> "LauncherService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def load_all(self) -> int:
        """Discover and start all plugins.

        Returns:
            Number of plugins registered
        """
        for plugin in self.discovery.discover_all():
            if self.lifecycle.start(plugin):
                self.registry.register(plugin)
            else:
                logger.warning(f"Skipping plugin {plugin.name}: {plugin.error}")

        logger.info(f"Plugin system initialized, {self.registry.count()} plugin(s) started")
        return self.registry.count()

    def dispatch(self, query: str) -> Optional[Tuple[PluginSource, Response]]:
        """Route a query to the first matching plugin and wait for its answer.

        Args:
            query: Raw query string from the search UI

        Returns:
            (plugin, response), or None if no plugin matches or the plugin
            gave no usable answer
        """
        plugin = self.registry.match(query)
        if plugin is None:
            return None

        with plugin.lock:
            self._settle(plugin)
            if not plugin.channel.write_line(encode(QueryEvent(value=query))):
                return None
            response = self._listen(plugin, self.response_timeout)

        return (plugin, response) if response is not None else None

    def listen(self, plugin: PluginSource, timeout: Optional[float] = None) -> Optional[Response]:
        """Read and decode one response from a plugin.

        A fill already collected on behalf of an earlier ``complete`` is
        returned without touching the channel.

        Args:
            plugin: Plugin to read from
            timeout: Seconds to wait; defaults to the service's response timeout

        Returns:
            Decoded response, or None on close, timeout or an unrecognised line
        """
        if timeout is None:
            timeout = self.response_timeout
        with plugin.lock:
            plugin.awaiting_reply = False
            if plugin.held_reply is not None:
                line, plugin.held_reply = plugin.held_reply, None
                return self._decode(plugin, line)
            return self._listen(plugin, timeout)

    def complete(self, plugin: PluginSource) -> bool:
        """Ask the plugin for a fill suggestion; read it back with ``listen``."""
        with plugin.lock:
            self._settle(plugin)
            plugin.held_reply = None
            if not plugin.channel.write_line(encode(CompleteEvent())):
                return False
            plugin.awaiting_reply = True
            return True

    def submit(self, plugin: PluginSource, selection_id: int) -> bool:
        """Tell the plugin the user chose a selection. No reply is expected."""
        with plugin.lock:
            return plugin.channel.write_line(encode(SubmitEvent(id=selection_id)))

    def shutdown(self, wait: bool = True) -> List[str]:
        """Ask every plugin to quit.

        Args:
            wait: Wait for each process to exit, terminating stragglers after
                the grace period. False only sends ``quit``.

        Returns:
            Names of plugins that did not exit on their own
        """
        plugins = [p for p in self.registry.get_all() if p.state == PluginState.STARTED]

        for plugin in plugins:
            self.lifecycle.quit(plugin)

        if not wait:
            return []

        forced = [p.name for p in plugins if not self.lifecycle.stop(p, self.shutdown_grace)]
        if forced:
            logger.warning(f"Force-terminated plugins: {', '.join(forced)}")
        logger.info("All plugins stopped")
        return forced

    def list_plugins(self) -> List[dict]:
        """List all registered plugins as dicts."""
        return [p.to_dict() for p in self.registry.get_all()]

    def _settle(self, plugin: PluginSource) -> None:
        """Make the channel idle before a new request.

        A fill still owed for an earlier ``complete`` is read (bounded by the
        response timeout) and held for ``listen``. Stray lines are dropped.
        """
        if plugin.awaiting_reply:
            plugin.awaiting_reply = False
            plugin.held_reply = plugin.channel.read_line(self.response_timeout)
        plugin.channel.discard_pending()

    def _listen(self, plugin: PluginSource, timeout: Optional[float]) -> Optional[Response]:
        line = plugin.channel.read_line(timeout)
        if line is None:
            return None
        return self._decode(plugin, line)

    def _decode(self, plugin: PluginSource, line: str) -> Optional[Response]:
        response = decode(line)
        if response is None:
            logger.warning(f"Plugin {plugin.name} sent an unrecognised response: {line!r}")
        return response
