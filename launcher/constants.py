"""Global constants for the launcher plugin host."""

import os
from pathlib import Path

# Plugin directories, scanned in this order (earlier directories win on pattern overlap)
SYSTEM_PLUGINS_DIR = Path(os.getenv("LAUNCHER_SYSTEM_PLUGINS_DIR", "/usr/lib/launcher/plugins"))
LOCAL_PLUGINS_DIR = Path(
    os.getenv("LAUNCHER_LOCAL_PLUGINS_DIR", str(Path.home() / ".local" / "share" / "launcher" / "plugins"))
).expanduser()

# Descriptor files are recognised by this suffix
DESCRIPTOR_SUFFIX = ".json"

# Seconds to wait for a plugin's reply before treating the request as unanswered
RESPONSE_TIMEOUT = float(os.getenv("LAUNCHER_RESPONSE_TIMEOUT", "5"))

# Seconds a plugin gets to exit after `quit` before it is terminated
SHUTDOWN_GRACE = float(os.getenv("LAUNCHER_SHUTDOWN_GRACE", "2"))

PROJECT_ROOT = Path(__file__).resolve().parent.parent
BUNDLED_PLUGINS_DIR = PROJECT_ROOT / "plugins" / "bundled"


def default_search_paths():
    """Return the (path, source_label) pairs scanned at startup, in precedence order."""
    return [
        (SYSTEM_PLUGINS_DIR, "system"),
        (LOCAL_PLUGINS_DIR, "local"),
    ]
