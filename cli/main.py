#!/usr/bin/env python
"""
Launcher plugin console - interactive debug tool for launcher plugins

Usage:
    python -m cli.main
    LAUNCHER_LOCAL_PLUGINS_DIR=./my-plugins python -m cli.main
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables FIRST (before importing project modules)
load_dotenv('.env')

from cli.repl import REPLRunner
from launcher.constants import default_search_paths
from launcher.plugins.manager import LauncherService

# Configure logging
log_dir = Path(__file__).parent.parent / "log"
log_dir.mkdir(exist_ok=True)

root_logger = logging.getLogger()
root_logger.setLevel(getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO))

# File handler - everything at INFO and above, including plugin stderr
file_handler = logging.FileHandler(
    log_dir / "cli.log",
    encoding='utf-8'
)
file_handler.setLevel(logging.INFO)
file_formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
file_handler.setFormatter(file_formatter)

# Console handler - WARNING and above only, so logs do not bury the results
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.WARNING)
console_formatter = logging.Formatter('%(levelname)s: %(message)s')
console_handler.setFormatter(console_formatter)

root_logger.addHandler(file_handler)
root_logger.addHandler(console_handler)


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Launcher plugin console',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '-t', '--timeout',
        type=float,
        default=None,
        help='Seconds to wait for a plugin response'
    )
    return parser.parse_args()


def main():
    args = parse_args()
    kwargs = {}
    if args.timeout is not None:
        kwargs["response_timeout"] = args.timeout

    service = LauncherService(search_paths=default_search_paths(), **kwargs)
    service.load_all()

    try:
        repl = REPLRunner(service)
        asyncio.run(repl.run())
    except KeyboardInterrupt:
        print("\n\033[33minterrupted\033[0m")
    finally:
        forced = service.shutdown()
        if forced:
            print(f"\033[33mforce-terminated: {', '.join(forced)}\033[0m")

    sys.exit(0)


if __name__ == "__main__":
    main()
