"""TrackerController: wires the pipeline together and owns the panel slot."""

import json
import logging
import os
import threading

from terminal_tracker.aggregator import Aggregator
from terminal_tracker.command_log import CommandLog
from terminal_tracker.config import Config
from terminal_tracker.event_queue import EventQueue
from terminal_tracker.metrics import Metrics
from terminal_tracker.models import TodayStats
from terminal_tracker.panel import HeatmapPanel
from terminal_tracker.poller import Poller
from terminal_tracker.today_stats import compute_today_stats, format_status
from terminal_tracker.validator import SnapshotValidator

logger = logging.getLogger(__name__)


class TrackerController:
    def __init__(self, config: Config, time_func=None):
        self._config = config
        self._time_func = time_func
        self.metrics = Metrics(config.metrics_file)
        self.queue = EventQueue(config.queue_file)
        self.command_log = CommandLog(config.log_file)
        self.poller = Poller(self.queue, self.command_log, self.metrics, time_func)
        self.aggregator = Aggregator(self.command_log, config.snapshot_file, self.metrics)
        self.validator = SnapshotValidator()
        self._panel: HeatmapPanel | None = None
        # Held for the duration of a poll cycle; timer ticks skip instead of waiting.
        self._cycle_guard = threading.Lock()
        # Guards the panel slot; web requests open and dispose panels concurrently.
        self._panel_lock = threading.Lock()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def panel(self) -> HeatmapPanel | None:
        return self._panel

    # --- poll cycles ---

    def tick(self) -> bool:
        """Timer-driven cycle. Returns True if new events were logged."""
        if not self._cycle_guard.acquire(blocking=False):
            logger.debug("Previous poll cycle still running, skipping tick")
            return False
        try:
            changed = self.poller.poll()
            if changed:
                logger.info(format_status(self.today_stats()))
                if self._panel is not None:
                    self.aggregator.aggregate()
                    self.push_update()
            return changed
        finally:
            self._cycle_guard.release()

    def refresh(self) -> bool:
        """User-initiated cycle: drain the queue and regenerate the snapshot."""
        with self._cycle_guard:
            changed = self.poller.poll()
            self.aggregator.aggregate()
        return changed

    # --- presentation ---

    def show_heatmap(self) -> HeatmapPanel:
        """Refresh data, then create the panel or reveal the existing one."""
        self.refresh()
        with self._panel_lock:
            if self._panel is not None:
                self._panel.reveal()
                return self._panel

            panel = HeatmapPanel(self.handle_message)
            panel.on_did_dispose(lambda: self._clear_panel(panel))
            self._panel = panel
        logger.info("Heatmap panel created")
        return panel

    def _clear_panel(self, panel: HeatmapPanel) -> None:
        with self._panel_lock:
            if self._panel is not panel:
                return
            self._panel = None
        logger.info("Heatmap panel disposed")

    def handle_message(self, panel: HeatmapPanel, message: dict) -> None:
        command = message.get("command") if isinstance(message, dict) else None
        if command != "loadData":
            logger.warning("Ignoring unknown panel message: %r", command)
            return
        try:
            data = self.load_snapshot()
        except (OSError, ValueError) as e:
            logger.error("Error loading data: %s", e)
            panel.post_message({"command": "dataLoaded", "data": []})
            return
        panel.post_message({"command": "dataLoaded", "data": data})
        panel.post_message({"command": "todayStats", "data": self.today_stats().to_dict()})

    def push_update(self) -> None:
        """Send fresh data to the live panel after new records arrive."""
        panel = self._panel
        if panel is None:
            return
        try:
            if not os.path.exists(self.aggregator.snapshot_file):
                return
            data = self.load_snapshot()
        except (OSError, ValueError) as e:
            logger.error("Error updating heatmap panel: %s", e)
            return
        panel.post_message({"command": "dataUpdated", "data": data})
        panel.post_message({"command": "todayStats", "data": self.today_stats().to_dict()})

    def load_snapshot(self) -> list[dict]:
        """Read and validate the snapshot. Missing snapshot reads as empty.

        Raises ValueError for malformed JSON or a schema violation.
        """
        path = self.aggregator.snapshot_file
        if not os.path.exists(path):
            return []
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        is_valid, errors = self.validator.validate(data)
        if not is_valid:
            raise ValueError(f"Invalid snapshot {path}: {'; '.join(errors[:3])}")
        return data

    # --- status ---

    def today_stats(self) -> TodayStats:
        return compute_today_stats(self.command_log, self._time_func)

    def status_text(self) -> str:
        return format_status(self.today_stats())
