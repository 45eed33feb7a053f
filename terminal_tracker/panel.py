"""HeatmapPanel: handle for one live presentation surface.

The panel is a message channel: requests come in through receive_message(),
responses and live pushes go out through post_message() and are collected
by whoever is rendering it (see web.py) via drain().
"""

import logging
import threading
from collections import deque

logger = logging.getLogger(__name__)


class HeatmapPanel:
    def __init__(self, handler, max_pending: int = 100):
        self._handler = handler
        self._outbox: deque[dict] = deque(maxlen=max_pending)
        self._lock = threading.Lock()
        self._dispose_callbacks = []
        self._disposed = False
        self.reveal_count = 0

    @property
    def disposed(self) -> bool:
        return self._disposed

    def post_message(self, message: dict) -> bool:
        """Queue a message for the front end. False once disposed."""
        if self._disposed:
            return False
        with self._lock:
            self._outbox.append(message)
        return True

    def receive_message(self, message: dict) -> None:
        if self._disposed:
            logger.debug("Ignoring message for disposed panel: %r", message)
            return
        self._handler(self, message)

    def drain(self) -> list[dict]:
        with self._lock:
            messages = list(self._outbox)
            self._outbox.clear()
        return messages

    def reveal(self) -> None:
        self.reveal_count += 1

    def on_did_dispose(self, callback) -> None:
        self._dispose_callbacks.append(callback)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        with self._lock:
            self._outbox.clear()
        for callback in self._dispose_callbacks:
            callback()
        self._dispose_callbacks.clear()
