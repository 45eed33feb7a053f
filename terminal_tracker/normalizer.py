"""Turns raw Event Queue lines into canonical events.

Accepted shapes, first match wins:

    2024-01-15T10:00:00Z|0 ZSH-SETUP     setup marker (timestamp kept as-is)
    2024-01-15T10:00:00Z|1               strict ISO 8601, Z suffix
    2024-01-15T10:00:00+0200|0           strict ISO 8601, numeric offset
    2024-01-15 anything                  bare date, host supplies the time

Anything else is dropped. Normalization never raises.
"""

import logging
import re
from datetime import datetime

from terminal_tracker.models import (
    ACTION_ENTER,
    ACTION_SETUP_FALLBACK,
    SOURCE_PROMPT,
    SOURCE_SETUP,
    CanonicalEvent,
)
from terminal_tracker.timestamps import (
    canonicalize_timestamp,
    local_now,
    synthesize_timestamp,
)

logger = logging.getLogger(__name__)

_ISO_UTC_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")
_ISO_OFFSET_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{4}$")
_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _is_strict_iso(timestamp: str) -> bool:
    if not (_ISO_UTC_RE.match(timestamp) or _ISO_OFFSET_RE.match(timestamp)):
        return False
    try:
        datetime.strptime(timestamp, "%Y-%m-%dT%H:%M:%S%z")
    except ValueError:
        return False
    return True


def _setup_event(timestamp: str, status_part: str) -> CanonicalEvent:
    pieces = status_part.split(" ")
    exit_status = pieces[0]
    tag = pieces[1] or ACTION_SETUP_FALLBACK
    try:
        timestamp = canonicalize_timestamp(timestamp)
    except ValueError:
        logger.debug("Keeping setup timestamp verbatim: %r", timestamp)
    return CanonicalEvent(timestamp, SOURCE_SETUP, tag, exit_status)


def normalize(raw_line: str, time_func=None) -> CanonicalEvent | None:
    """Parse one raw queue line. Returns None for lines that should be dropped."""
    now_func = time_func or local_now
    timestamp = raw_line.strip()
    exit_status = "0"

    if "|" in timestamp:
        parts = timestamp.split("|")
        timestamp, exit_status = parts[0], parts[1]
        if " " in exit_status:
            return _setup_event(timestamp, exit_status)

    try:
        if _is_strict_iso(timestamp):
            return CanonicalEvent(
                canonicalize_timestamp(timestamp), SOURCE_PROMPT, ACTION_ENTER, exit_status,
            )
        if _DATE_PREFIX_RE.match(timestamp):
            synthesized = synthesize_timestamp(timestamp[:10], now_func())
            return CanonicalEvent(synthesized, SOURCE_PROMPT, ACTION_ENTER, exit_status)
    except ValueError as e:
        logger.debug("Dropping queue line %r: %s", raw_line, e)
        return None

    logger.debug("Dropping unrecognized queue line: %r", raw_line)
    return None
