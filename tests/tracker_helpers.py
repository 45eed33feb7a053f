"""Shared test clock and config builders."""

import os
from datetime import datetime, timedelta, timezone

from terminal_tracker.config import Config

PLUS_TWO = timezone(timedelta(hours=2))
FIXED_NOW = datetime(2024, 1, 16, 14, 30, 5, tzinfo=PLUS_TWO)


def fixed_clock():
    return FIXED_NOW


def make_config(data_dir: str, **overrides) -> Config:
    values = dict(data_dir=data_dir, watch_queue=False, web_enabled=False)
    values.update(overrides)
    return Config(**values)


def enqueue(path: str, *lines: str) -> None:
    """Append raw lines to a queue file the way a prompt hook does."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(line if line.endswith("\n") else line + "\n")
