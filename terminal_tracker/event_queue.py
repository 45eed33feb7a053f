"""Event Queue File: shell-writable scratch file, one raw event per line."""

import os


class EventQueue:
    def __init__(self, path: str):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def read(self) -> str | None:
        """Return the whole queue contents, or None if the file does not exist."""
        if not os.path.exists(self._path):
            return None
        with open(self._path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()

    def truncate(self) -> None:
        with open(self._path, "w", encoding="utf-8"):
            pass
