"""QueueWatcher: watchdog handler that wakes the poll loop early.

The watcher only signals; the run loop stays the single caller of tick().
"""

import logging
import os
import threading

from watchdog.events import FileSystemEventHandler

logger = logging.getLogger(__name__)


class QueueWatcher(FileSystemEventHandler):
    def __init__(self, queue_file: str, wake: threading.Event | None = None):
        super().__init__()
        self._queue_file = os.path.abspath(queue_file)
        self.wake = wake or threading.Event()

    @property
    def watched_dir(self) -> str:
        return os.path.dirname(self._queue_file)

    def _matches(self, event) -> bool:
        if event.is_directory:
            return False
        return os.path.abspath(event.src_path) == self._queue_file

    def on_created(self, event):
        if self._matches(event):
            logger.debug("Queue file created: %s", self._queue_file)
            self.wake.set()

    def on_modified(self, event):
        if self._matches(event):
            self.wake.set()

    def wait(self, timeout: float) -> bool:
        """Block until the queue changes or *timeout* elapses. True if woken early."""
        woken = self.wake.wait(timeout)
        self.wake.clear()
        return woken
