"""Aggregator: folds the whole Command Log into per-day summaries.

The snapshot is regenerated wholesale on every run and written atomically
(tmp file + os.replace). Only the aggregator writes the snapshot.
"""

import json
import logging
import os
import tempfile

from terminal_tracker.command_log import CommandLog
from terminal_tracker.metrics import Metrics
from terminal_tracker.models import DaySummary, LogRecord
from terminal_tracker.timestamps import local_date

logger = logging.getLogger(__name__)


def classify(record: LogRecord) -> str | None:
    """Return "success", "failure", or None for records that are not classified.

    Setup markers and records without an exit status count toward the total
    but are never classified.
    """
    if record.is_setup or record.exit_status is None:
        return None
    return "success" if record.exit_status == "0" else "failure"


def summarize(records: list[LogRecord]) -> list[DaySummary]:
    """Build day summaries sorted ascending by date."""
    days: dict[str, DaySummary] = {}
    for record in records:
        try:
            day = local_date(record.date)
        except ValueError:
            logger.debug("Skipping log record with unusable date: %r", record.timestamp)
            continue
        if day not in days:
            days[day] = DaySummary(date=day)
        summary = days[day]
        summary.count += 1
        outcome = classify(record)
        if outcome == "success":
            summary.success += 1
        elif outcome == "failure":
            summary.failure += 1
    return [days[day] for day in sorted(days)]


def render_snapshot(summaries: list[DaySummary]) -> str:
    return json.dumps([s.to_dict() for s in summaries], indent=2)


class Aggregator:
    def __init__(self, command_log: CommandLog, snapshot_file: str,
                 metrics: Metrics | None = None):
        self._log = command_log
        self._snapshot_file = snapshot_file
        self._metrics = metrics or Metrics()

    @property
    def snapshot_file(self) -> str:
        return self._snapshot_file

    def aggregate(self) -> list[DaySummary] | None:
        """Recompute and persist the snapshot.

        Returns None when there is no Command Log yet (nothing is written)
        or when an I/O error aborts the run.
        """
        if not self._log.exists():
            logger.warning("No terminal command logs found yet.")
            return None
        try:
            summaries = summarize(self._log.records())
            self._write_snapshot(render_snapshot(summaries))
        except OSError as e:
            logger.error("Error generating heatmap data: %s", e)
            return None

        self._metrics.record_aggregation(len(summaries))
        logger.info("Generated heatmap data with %d days of data", len(summaries))
        return summaries

    def _write_snapshot(self, text: str) -> None:
        directory = os.path.dirname(self._snapshot_file) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self._snapshot_file)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
