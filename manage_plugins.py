#!/usr/bin/env python3
"""Plugin management CLI tool."""

import argparse
import json
import os
import re
import shutil
import sys
from pathlib import Path

from dotenv import load_dotenv

# Ensure project root is in path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

load_dotenv('.env')

from launcher.constants import BUNDLED_PLUGINS_DIR, LOCAL_PLUGINS_DIR, default_search_paths
from launcher.plugins.discovery import PluginDiscovery
from launcher.plugins.manifest import read_descriptor


def get_discovery() -> PluginDiscovery:
    """Create a PluginDiscovery instance over the system and local directories."""
    return PluginDiscovery(default_search_paths())


def find_plugin(name: str):
    """Return the first discovered plugin with this name, or None."""
    plugins = get_discovery().discover_all()
    return next((p for p in plugins if p.name == name), None)


def cmd_list(args):
    """List all discovered plugins in routing order."""
    plugins = get_discovery().discover_all()

    if not plugins:
        print("No plugins found.")
        return

    print(f"{'#':<4} {'Name':<20} {'Source':<8} {'Pattern':<24} {'Exec'}")
    print("-" * 90)

    for i, p in enumerate(plugins, 1):
        print(
            f"{i:<4} {p.name:<20} {p.source:<8} {str(p.descriptor.pattern or '-'):<24} "
            f"{p.descriptor.exec or '-'}"
        )


def cmd_info(args):
    """Show detailed plugin information."""
    plugin = find_plugin(args.name)
    if not plugin:
        print(f"Plugin '{args.name}' not found.")
        sys.exit(1)

    d = plugin.descriptor
    print(f"Plugin: {plugin.name}")
    print(f"  Description: {d.description}")
    print(f"  Pattern:     {d.pattern}")
    print(f"  Exec:        {plugin.directory / d.exec if d.exec else None}")
    print(f"  Icon:        {d.icon}")
    print(f"  Source:      {plugin.source}")
    print(f"  Descriptor:  {plugin.path}")


def copy_executable(source: Path, dest: Path):
    """Copy a plugin executable and make it executable.

    Python scripts get this interpreter in their shebang: bundled plugins
    import ``launcher``, which the interpreter running this tool can import.
    """
    content = source.read_bytes()
    first_line, sep, rest = content.partition(b"\n")
    if first_line.startswith(b"#!") and b"python" in first_line:
        content = b"#!" + sys.executable.encode() + sep + rest
    dest.write_bytes(content)
    shutil.copymode(source, dest)
    dest.chmod(dest.stat().st_mode | 0o111)


def cmd_install(args):
    """Install a plugin descriptor and its executable into the local directory."""
    source = Path(args.path)
    if not source.exists():
        # Allow installing a bundled plugin by name, e.g. `install files`
        source = BUNDLED_PLUGINS_DIR / args.path / f"{args.path}.json"
    source = source.resolve()

    if not source.is_file():
        print(f"Descriptor does not exist: {args.path}")
        sys.exit(1)

    descriptor = read_descriptor(source)
    if descriptor is None or not isinstance(descriptor.exec, str) or not descriptor.exec:
        print(f"{source} is not a valid plugin descriptor (needs at least 'exec')")
        sys.exit(1)

    exec_source = source.parent / descriptor.exec
    if not exec_source.is_file():
        print(f"Executable does not exist: {exec_source}")
        sys.exit(1)

    dest = LOCAL_PLUGINS_DIR / source.name
    exec_dest = LOCAL_PLUGINS_DIR / descriptor.exec
    for path in (dest, exec_dest):
        if path.exists():
            print(f"Already installed: {path}")
            sys.exit(1)

    exec_dest.parent.mkdir(parents=True, exist_ok=True)
    copy_executable(exec_source, exec_dest)
    shutil.copy2(source, dest)
    print(f"Plugin '{descriptor.name}' installed to {dest}")
    print("Restart the launcher to load it.")


def cmd_doctor(args):
    """Run health checks on the plugin directories."""
    issues = []

    for directory, source in default_search_paths():
        if not directory.is_dir():
            print(f"{source} plugin directory missing (skipped): {directory}")

    for directory, _ in default_search_paths():
        if not directory.is_dir():
            continue
        for entry in sorted(directory.glob("*.json")):
            try:
                with open(entry, encoding="utf-8") as f:
                    json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                issues.append(f"{entry}: unreadable descriptor: {e}")

    plugins = get_discovery().discover_all()
    for p in plugins:
        try:
            re.compile(p.descriptor.pattern)
        except (re.error, TypeError) as e:
            issues.append(f"Plugin '{p.name}': invalid pattern {p.descriptor.pattern!r}: {e}")

        if not p.descriptor.exec:
            issues.append(f"Plugin '{p.name}': descriptor has no exec")
            continue
        if not isinstance(p.descriptor.exec, str):
            issues.append(f"Plugin '{p.name}': exec is not a path: {p.descriptor.exec!r}")
            continue
        exec_path = p.directory / p.descriptor.exec
        if not exec_path.is_file():
            issues.append(f"Plugin '{p.name}': executable missing: {exec_path}")
        elif not os.access(exec_path, os.X_OK):
            issues.append(f"Plugin '{p.name}': executable not executable: {exec_path}")

    if issues:
        print(f"Found {len(issues)} issue(s):")
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
        sys.exit(1)
    else:
        print(f"All checks passed. {len(plugins)} plugin(s) found.")


def main():
    parser = argparse.ArgumentParser(description="Launcher Plugin Manager")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list
    subparsers.add_parser("list", help="List all plugins in routing order")

    # info
    info_parser = subparsers.add_parser("info", help="Show plugin details")
    info_parser.add_argument("name", help="Plugin name")

    # install
    install_parser = subparsers.add_parser("install", help="Install a plugin descriptor into the local directory")
    install_parser.add_argument("path", help="Path to a descriptor file, or the name of a bundled plugin")

    # doctor
    subparsers.add_parser("doctor", help="Run health checks")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "list": cmd_list,
        "info": cmd_info,
        "install": cmd_install,
        "doctor": cmd_doctor,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
