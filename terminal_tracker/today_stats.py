"""Today-Stats: live view of the current local day, read straight from the log."""

import logging

from terminal_tracker.aggregator import classify
from terminal_tracker.command_log import CommandLog
from terminal_tracker.models import TodayStats
from terminal_tracker.timestamps import local_now, today_str

logger = logging.getLogger(__name__)


def compute_today_stats(command_log: CommandLog, time_func=None) -> TodayStats:
    """Tally today's records. A missing or unreadable log yields zero stats."""
    now_func = time_func or local_now
    stats = TodayStats(date=today_str(now_func()))
    try:
        records = command_log.records()
    except OSError as e:
        logger.error("Error getting today statistics: %s", e)
        return stats

    for record in records:
        if record.date != stats.date:
            continue
        stats.total += 1
        outcome = classify(record)
        if outcome == "success":
            stats.success += 1
        elif outcome == "failure":
            stats.failure += 1
    return stats


def format_status(stats: TodayStats) -> str:
    """Status-line text, e.g. ``Terminal Tracker (12 today, 92% success)``."""
    return f"Terminal Tracker ({stats.total} today, {stats.success_rate}% success)"
