"""Event, log record and summary models for the tracking pipeline."""

import math
import re
from dataclasses import dataclass

SOURCE_PROMPT = "prompt-tracking"
SOURCE_SETUP = "setup"
ACTION_ENTER = "enter-pressed"
ACTION_SETUP_FALLBACK = "initialization"

_EXIT_RE = re.compile(r"exit=(\d+)")


def _field(value: str) -> str:
    return value.replace("\t", " ").replace("\n", " ")


@dataclass(frozen=True)
class CanonicalEvent:
    timestamp: str       # ISO 8601 with explicit zone
    source: str          # prompt-tracking | setup
    action: str
    exit_status: str = "0"

    def to_log_line(self) -> str:
        """Tab-separated Command Log record, newline-terminated."""
        return (
            f"{_field(self.timestamp)}\t{_field(self.source)}\t"
            f"{_field(self.action)}\texit={_field(self.exit_status)}\n"
        )


@dataclass(frozen=True)
class LogRecord:
    timestamp: str
    source: str
    action: str
    exit_status: str | None   # None when no exit=<digits> is present

    @property
    def date(self) -> str:
        return self.timestamp[:10]

    @property
    def is_setup(self) -> bool:
        return self.source == SOURCE_SETUP


def parse_log_line(line: str) -> LogRecord | None:
    """Parse one Command Log line. Returns None for blank lines."""
    line = line.rstrip("\n")
    if not line.strip():
        return None
    parts = line.split("\t")
    match = _EXIT_RE.search(line)
    return LogRecord(
        timestamp=parts[0],
        source=parts[1] if len(parts) > 1 else "",
        action=parts[2] if len(parts) > 2 else "",
        exit_status=match.group(1) if match else None,
    )


def success_rate(success: int, failure: int) -> int:
    """Percentage of classified commands that succeeded, rounded half-up.

    A day with nothing classified counts as fully successful.
    """
    classified = success + failure
    if classified == 0:
        return 100
    return int(math.floor(success / classified * 100 + 0.5))


@dataclass
class DaySummary:
    date: str
    count: int = 0
    success: int = 0
    failure: int = 0

    @property
    def success_rate(self) -> int:
        return success_rate(self.success, self.failure)

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "count": self.count,
            "success": self.success,
            "failure": self.failure,
            "successRate": self.success_rate,
        }


@dataclass
class TodayStats:
    date: str
    total: int = 0
    success: int = 0
    failure: int = 0

    @property
    def success_rate(self) -> int:
        return success_rate(self.success, self.failure)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "success": self.success,
            "failure": self.failure,
            "successRate": self.success_rate,
            "date": self.date,
        }
