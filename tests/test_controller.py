"""Tests for the controller: poll cycles, panel slot and message contract."""

import json
import os
import shutil
import tempfile
import threading
import time
import unittest
from unittest.mock import patch

from terminal_tracker.controller import TrackerController
from terminal_tracker.panel import HeatmapPanel
from tracker_helpers import enqueue, fixed_clock, make_config


class ControllerTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.config = make_config(self.tmpdir)
        self.controller = TrackerController(self.config, time_func=fixed_clock)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _enqueue(self, *lines: str) -> None:
        for line in lines:
            enqueue(self.controller.queue.path, line)


class TestTick(ControllerTestCase):
    def test_nothing_queued(self):
        self.assertFalse(self.controller.tick())
        self.assertEqual(self.controller.metrics.get("polls_performed"), 1)

    def test_new_data_without_panel_skips_aggregation(self):
        self._enqueue("2024-01-16T10:00:00+0200|0")
        self.assertTrue(self.controller.tick())
        self.assertTrue(os.path.exists(self.config.log_file))
        self.assertFalse(os.path.exists(self.config.snapshot_file))

    def test_new_data_pushes_to_live_panel(self):
        panel = self.controller.show_heatmap()
        self._enqueue("2024-01-16T10:00:00+0200|0", "2024-01-16T10:01:00+0200|1")
        self.assertTrue(self.controller.tick())
        messages = panel.drain()
        self.assertEqual([m["command"] for m in messages], ["dataUpdated", "todayStats"])
        self.assertEqual(messages[0]["data"], [
            {"date": "2024-01-16", "count": 2, "success": 1, "failure": 1, "successRate": 50},
        ])
        self.assertEqual(messages[1]["data"]["total"], 2)

    def test_no_push_when_nothing_new(self):
        panel = self.controller.show_heatmap()
        self.assertFalse(self.controller.tick())
        self.assertEqual(panel.drain(), [])

    def test_tick_skipped_while_cycle_running(self):
        self._enqueue("2024-01-16T10:00:00+0200|0")
        self.controller._cycle_guard.acquire()
        try:
            self.assertFalse(self.controller.tick())
        finally:
            self.controller._cycle_guard.release()
        self.assertEqual(self.controller.metrics.get("polls_performed"), 0)
        self.assertTrue(self.controller.tick())


class TestShowHeatmap(ControllerTestCase):
    def test_creates_panel_and_snapshot(self):
        self._enqueue("2024-01-15T10:00:00Z|0")
        panel = self.controller.show_heatmap()
        self.assertIs(self.controller.panel, panel)
        self.assertTrue(os.path.exists(self.config.snapshot_file))
        self.assertEqual(self.controller.queue.read(), "")

    def test_without_logs_still_opens_panel(self):
        panel = self.controller.show_heatmap()
        self.assertIsNotNone(panel)
        self.assertFalse(os.path.exists(self.config.snapshot_file))

    def test_reveals_existing_panel(self):
        first = self.controller.show_heatmap()
        second = self.controller.show_heatmap()
        self.assertIs(first, second)
        self.assertEqual(first.reveal_count, 1)

    def test_dispose_clears_slot(self):
        first = self.controller.show_heatmap()
        first.dispose()
        self.assertIsNone(self.controller.panel)
        second = self.controller.show_heatmap()
        self.assertIsNot(first, second)
        self.assertEqual(second.reveal_count, 0)


class _SlowPanel(HeatmapPanel):
    def __init__(self, *args, **kwargs):
        time.sleep(0.05)
        super().__init__(*args, **kwargs)


class TestPanelSlotConcurrency(ControllerTestCase):
    def test_concurrent_opens_share_one_panel(self):
        barrier = threading.Barrier(2)
        opened = []

        def open_panel():
            barrier.wait()
            opened.append(self.controller.show_heatmap())

        with patch.object(self.controller, "refresh"), \
                patch("terminal_tracker.controller.HeatmapPanel", _SlowPanel):
            threads = [threading.Thread(target=open_panel) for _ in range(2)]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=5)

        self.assertEqual(len(opened), 2)
        self.assertIs(opened[0], opened[1])
        self.assertIs(self.controller.panel, opened[0])
        self.assertEqual(opened[0].reveal_count, 1)

    def test_stale_dispose_keeps_live_panel(self):
        stale = self.controller.show_heatmap()
        stale.dispose()
        live = self.controller.show_heatmap()
        self.controller._clear_panel(stale)
        self.assertIs(self.controller.panel, live)
        self.assertFalse(live.disposed)

        enqueue(self.config.queue_file, "2024-01-16T10:00:00+0200|0")
        self.assertTrue(self.controller.tick())
        self.assertEqual([m["command"] for m in live.drain()], ["dataUpdated", "todayStats"])


class TestLoadData(ControllerTestCase):
    def test_load_data_sends_snapshot_and_today(self):
        self._enqueue("2024-01-15T10:00:00Z|0", "2024-01-16T09:00:00+0200|1")
        panel = self.controller.show_heatmap()
        panel.receive_message({"command": "loadData"})
        messages = panel.drain()
        self.assertEqual([m["command"] for m in messages], ["dataLoaded", "todayStats"])
        self.assertEqual([d["date"] for d in messages[0]["data"]], ["2024-01-15", "2024-01-16"])
        self.assertEqual(messages[1]["data"], {
            "total": 1, "success": 0, "failure": 1, "successRate": 0, "date": "2024-01-16",
        })

    def test_no_snapshot_sends_empty_data(self):
        panel = self.controller.show_heatmap()
        panel.receive_message({"command": "loadData"})
        messages = panel.drain()
        self.assertEqual(messages[0], {"command": "dataLoaded", "data": []})
        self.assertEqual(messages[1]["data"]["successRate"], 100)

    def test_malformed_snapshot_sends_empty_data(self):
        panel = self.controller.show_heatmap()
        with open(self.config.snapshot_file, "w") as f:
            f.write("{not json")
        panel.receive_message({"command": "loadData"})
        self.assertEqual(panel.drain(), [{"command": "dataLoaded", "data": []}])

    def test_schema_violation_sends_empty_data(self):
        panel = self.controller.show_heatmap()
        with open(self.config.snapshot_file, "w") as f:
            json.dump([{"date": "2024-01-15", "count": -1}], f)
        panel.receive_message({"command": "loadData"})
        self.assertEqual(panel.drain(), [{"command": "dataLoaded", "data": []}])

    def test_unknown_command_ignored(self):
        panel = self.controller.show_heatmap()
        panel.receive_message({"command": "deleteEverything"})
        panel.receive_message({})
        self.assertEqual(panel.drain(), [])


class TestStatus(ControllerTestCase):
    def test_status_text(self):
        self._enqueue("2024-01-16T10:00:00+0200|0", "2024-01-16T10:01:00+0200|0")
        self.controller.tick()
        self.assertEqual(self.controller.status_text(), "Terminal Tracker (2 today, 100% success)")


if __name__ == "__main__":
    unittest.main()
