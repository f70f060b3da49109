"""Plugin system for the launcher.

Imports are lazy so plugin implementations can use the protocol codec without
pulling in the process-management side.
"""

__all__ = [
    "PluginDescriptor",
    "PluginRegistry",
    "PluginSource",
    "PluginState",
    "PluginDiscovery",
    "PluginLifecycle",
    "ProcessChannel",
    "LauncherService",
]


def __getattr__(name):
    if name == "PluginDescriptor":
        from launcher.plugins.manifest import PluginDescriptor
        return PluginDescriptor
    if name in ("PluginRegistry", "PluginSource", "PluginState"):
        from launcher.plugins import registry
        return getattr(registry, name)
    if name == "PluginDiscovery":
        from launcher.plugins.discovery import PluginDiscovery
        return PluginDiscovery
    if name == "PluginLifecycle":
        from launcher.plugins.lifecycle import PluginLifecycle
        return PluginLifecycle
    if name == "ProcessChannel":
        from launcher.plugins.channel import ProcessChannel
        return ProcessChannel
    if name == "LauncherService":
        from launcher.plugins.manager import LauncherService
        return LauncherService
    raise AttributeError(f"module 'launcher.plugins' has no attribute {name!r}")
