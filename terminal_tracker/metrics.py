"""Poll-loop counters and the derived rates written to the metrics file."""

import json
import os
import tempfile
import time

from terminal_tracker.timestamps import local_now

COUNTERS = (
    "polls_performed",
    "empty_polls",
    "events_logged",
    "lines_dropped",
    "poll_failures",
    "aggregations",
)


def _ratio(part: int, whole: int) -> float:
    return round(part / whole, 3) if whole else 0.0


class Metrics:
    def __init__(self, path: str | None = None):
        self._counters: dict[str, int] = {name: 0 for name in COUNTERS}
        self._path = path
        self._started = time.monotonic()
        self._last_event_at: str | None = None
        self._days_tracked = 0

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    # --- recording, called by the poller and aggregator ---

    def record_poll(self, logged: int, dropped: int) -> None:
        """One poll cycle that found queue content."""
        self._counters["polls_performed"] += 1
        self._counters["events_logged"] += logged
        self._counters["lines_dropped"] += dropped
        if logged:
            self._last_event_at = local_now().isoformat(timespec="seconds")

    def record_empty_poll(self) -> None:
        self._counters["polls_performed"] += 1
        self._counters["empty_polls"] += 1

    def record_failure(self) -> None:
        self._counters["polls_performed"] += 1
        self._counters["poll_failures"] += 1

    def record_aggregation(self, days: int) -> None:
        self._counters["aggregations"] += 1
        self._days_tracked = days

    # --- reporting ---

    def report(self) -> dict:
        polls = self._counters["polls_performed"]
        lines = self._counters["events_logged"] + self._counters["lines_dropped"]
        return {
            "counters": dict(self._counters),
            "rates": {
                "empty_poll_rate": _ratio(self._counters["empty_polls"], polls),
                "failure_rate": _ratio(self._counters["poll_failures"], polls),
                "drop_rate": _ratio(self._counters["lines_dropped"], lines),
            },
            "days_tracked": self._days_tracked,
            "last_event_at": self._last_event_at,
            "uptime_seconds": round(time.monotonic() - self._started, 1),
        }

    def save(self) -> None:
        """Write report() atomically. No-op without a path; OSError propagates."""
        if not self._path:
            return
        directory = os.path.dirname(self._path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(self.report(), f, indent=2)
            os.replace(tmp, self._path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
