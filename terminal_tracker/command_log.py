"""Command Log: append-only tab-separated store of canonical events."""

import logging
import os
from typing import Iterable

from terminal_tracker.models import CanonicalEvent, LogRecord, parse_log_line

logger = logging.getLogger(__name__)


class CommandLog:
    def __init__(self, path: str):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        return os.path.exists(self._path)

    def append(self, events: Iterable[CanonicalEvent]) -> int:
        """Append events as LogRecords. Returns the number of records written."""
        lines = [event.to_log_line() for event in events]
        if not lines:
            return 0
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        with open(self._path, "a", encoding="utf-8") as f:
            f.writelines(lines)
        for line in lines:
            logger.debug("Logged command: %s", line.rstrip("\n"))
        return len(lines)

    def read_lines(self) -> list[str]:
        """Read the whole log once. Missing log reads as empty."""
        if not self.exists():
            return []
        with open(self._path, "r", encoding="utf-8", errors="replace") as f:
            return f.read().splitlines()

    def records(self) -> list[LogRecord]:
        records = []
        for line in self.read_lines():
            record = parse_log_line(line)
            if record is not None:
                records.append(record)
        return records
