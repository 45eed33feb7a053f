"""Poller: drains the Event Queue File into the Command Log."""

import logging

from terminal_tracker.command_log import CommandLog
from terminal_tracker.event_queue import EventQueue
from terminal_tracker.metrics import Metrics
from terminal_tracker.normalizer import normalize

logger = logging.getLogger(__name__)


class Poller:
    def __init__(self, queue: EventQueue, command_log: CommandLog,
                 metrics: Metrics | None = None, time_func=None):
        self._queue = queue
        self._log = command_log
        self._metrics = metrics or Metrics()
        self._time_func = time_func

    def poll(self) -> bool:
        """Run one drain cycle. Returns True iff at least one event was logged.

        A missing or blank queue is a no-op. I/O errors are logged and the
        cycle reports no change; the next cycle starts over. A line appended
        to the log whose truncate then failed is logged again next cycle.
        """
        try:
            content = self._queue.read()
            if content is None or not content.strip():
                self._metrics.record_empty_poll()
                return False

            lines = content.strip().split("\n")
            events = []
            for line in lines:
                event = normalize(line, self._time_func)
                if event is not None:
                    events.append(event)
            dropped = len(lines) - len(events)

            written = self._log.append(events)
            self._queue.truncate()
        except OSError as e:
            self._metrics.record_failure()
            logger.error("Error processing queue file %s: %s", self._queue.path, e)
            return False

        self._metrics.record_poll(written, dropped)
        logger.info("Processed %d queue line(s): %d logged, %d dropped",
                    len(lines), written, dropped)
        return written > 0
