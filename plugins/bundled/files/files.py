#!/usr/bin/env python3
"""Path completion plugin.

Lists entries of the directory named by the query, filtered by the partial
name after the last slash, and opens the chosen entry with xdg-open.

The plugin imports ``launcher``, so the interpreter in its shebang must be able
to import this package. `manage_plugins.py install files` points the shebang at
the interpreter running the installer.
"""

import logging
import mimetypes
import os
import subprocess
import sys
from dataclasses import dataclass
from typing import List

from launcher.plugins.protocol import (
    CompleteEvent,
    FillResponse,
    QueriedResponse,
    QueryEvent,
    QuitEvent,
    Selection,
    SubmitEvent,
    decode_event,
    encode_response,
)

# Plugin stderr ends up in the launcher's log
logging.basicConfig(stream=sys.stderr, level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger("files")

MAX_SELECTIONS = 10


@dataclass
class Entry:
    name: str
    is_dir: bool
    content_type: str


class FilesPlugin:
    def __init__(self, out=sys.stdout):
        self.out = out
        self.entries: List[Entry] = []
        self.parent = ""
        self.last_query = ""

    def send(self, response) -> None:
        self.out.write(encode_response(response) + "\n")
        self.out.flush()

    def entry_path(self, entry: Entry) -> str:
        text = self.parent + ("" if self.parent.endswith("/") else "/") + entry.name
        if entry.is_dir:
            text += "/"
        return text

    def query(self, value: str) -> None:
        self.last_query = value
        self.entries = []
        self.parent = os.path.dirname(value) or "/"

        base = os.path.basename(value)
        directory = os.path.expanduser(self.parent)

        try:
            with os.scandir(directory) as it:
                for item in it:
                    if base and base not in item.name:
                        continue
                    is_dir = item.is_dir()
                    content_type = "inode/directory" if is_dir else (
                        mimetypes.guess_type(item.name)[0] or "application/octet-stream"
                    )
                    self.entries.append(Entry(item.name, is_dir, content_type))
                    if len(self.entries) == MAX_SELECTIONS:
                        break
        except OSError as e:
            logger.warning(f"query error: {e}")

        self.entries.sort(key=lambda e: e.name.lower())

        selections = [
            Selection(id=i, name=e.name, description=None, content_type=e.content_type)
            for i, e in enumerate(self.entries)
        ]
        self.send(QueriedResponse(selections=selections))

    def complete(self) -> None:
        if self.entries:
            text = self.entry_path(self.entries[0])
        else:
            text = self.last_query
        self.send(FillResponse(text=text))

    def submit(self, selection_id: int) -> None:
        if not 0 <= selection_id < len(self.entries):
            return

        path = os.path.expanduser(self.entry_path(self.entries[selection_id]))
        try:
            subprocess.Popen(["xdg-open", path], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            logger.warning(f"xdg-open failed: {e}")


def main() -> None:
    plugin = FilesPlugin()

    for line in iter(sys.stdin.readline, ""):
        event = decode_event(line)
        if isinstance(event, QueryEvent):
            plugin.query(event.value)
        elif isinstance(event, CompleteEvent):
            plugin.complete()
        elif isinstance(event, SubmitEvent):
            plugin.submit(event.id)
        elif isinstance(event, QuitEvent):
            break


if __name__ == "__main__":
    main()
