"""Plugin lifecycle management - handles state transitions."""

import logging
import re
from pathlib import Path
from typing import Dict, Optional

from launcher.plugins.channel import ProcessChannel
from launcher.plugins.protocol import QuitEvent, encode
from launcher.plugins.registry import PluginSource, PluginState

logger = logging.getLogger(__name__)


class PluginLifecycle:
    """Manages plugin state transitions: discovered → started → stopped."""

    def __init__(self, env: Optional[Dict[str, str]] = None):
        """
        Args:
            env: Environment for spawned plugins (inherits ours when None)
        """
        self.env = env

    def compile(self, plugin: PluginSource) -> bool:
        """Compile the plugin's routing pattern.

        Returns:
            True if the pattern compiled
        """
        try:
            plugin.pattern = re.compile(plugin.descriptor.pattern)
            return True
        except (re.error, TypeError) as e:
            plugin.state = PluginState.ERROR
            plugin.error = f"invalid pattern {plugin.descriptor.pattern!r}: {e}"
            logger.error(f"Failed to compile pattern for plugin {plugin.name}: {e}")
            return False

    def resolve_exec(self, plugin: PluginSource) -> Optional[Path]:
        """Resolve the plugin's executable relative to its descriptor directory."""
        if not plugin.descriptor.exec:
            plugin.state = PluginState.ERROR
            plugin.error = "descriptor has no exec"
            logger.error(f"Plugin {plugin.name} has no exec in {plugin.path}")
            return None
        if not isinstance(plugin.descriptor.exec, str):
            plugin.state = PluginState.ERROR
            plugin.error = f"exec is not a path: {plugin.descriptor.exec!r}"
            logger.error(f"Plugin {plugin.name} has a non-string exec in {plugin.path}")
            return None
        return plugin.directory / plugin.descriptor.exec

    def start(self, plugin: PluginSource) -> bool:
        """Compile the pattern and spawn the plugin process.

        Args:
            plugin: Discovered plugin to start

        Returns:
            True if started successfully
        """
        if plugin.state != PluginState.DISCOVERED:
            logger.error(
                f"Cannot start plugin {plugin.name}: state is {plugin.state}, expected DISCOVERED"
            )
            return False

        if not self.compile(plugin):
            return False

        exec_path = self.resolve_exec(plugin)
        if exec_path is None:
            return False

        channel = ProcessChannel.spawn(exec_path, env=self.env)
        if channel is None:
            plugin.state = PluginState.ERROR
            plugin.error = f"failed to spawn {exec_path}"
            return False

        plugin.channel = channel
        plugin.state = PluginState.STARTED
        logger.info(f"Started plugin: {plugin.name} (pid {channel.pid})")
        return True

    def quit(self, plugin: PluginSource) -> bool:
        """Ask the plugin to exit. Safe to call on a plugin that already exited.

        Returns:
            True if the quit event was written
        """
        if plugin.channel is None:
            return False
        return plugin.channel.write_line(encode(QuitEvent()))

    def stop(self, plugin: PluginSource, grace: float) -> bool:
        """Wait for the plugin to exit, terminating it after the grace period.

        Args:
            plugin: Plugin that was asked to quit
            grace: Seconds to wait before each escalation

        Returns:
            True if the plugin exited on its own
        """
        channel = plugin.channel
        if channel is None:
            return True

        exited = channel.wait(grace)
        if not exited:
            logger.warning(f"Plugin {plugin.name} ignored quit for {grace}s")
            channel.terminate()
            if not channel.wait(grace):
                channel.kill()
                channel.wait(grace)

        plugin.state = PluginState.STOPPED
        logger.info(f"Stopped plugin: {plugin.name}")
        return exited
