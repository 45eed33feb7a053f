#!/usr/bin/env python3
"""Terminal Tracker entry point."""

import json
import logging
import os
import signal
import sys
import time
from argparse import ArgumentParser

from watchdog.observers import Observer

from terminal_tracker.config import load_config
from terminal_tracker.controller import TrackerController
from terminal_tracker.watcher import QueueWatcher
from terminal_tracker.web import create_app, run_web

logger = logging.getLogger(__name__)

NO_LOGS_NOTICE = "No terminal command logs found yet."

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="terminal-tracker",
        description="Track shell command activity and build a daily heatmap.",
    )
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Poll the event queue continuously")
    run.add_argument("--no-web", action="store_true", help="Do not start the heatmap web panel")

    sub.add_parser("poll", help="Drain the event queue once")
    sub.add_parser("aggregate", help="Regenerate the heatmap snapshot")

    today = sub.add_parser("today", help="Show today's command statistics")
    today.add_argument(
        "--output", choices=["text", "json"], default="text",
        help="Output format (default: text)",
    )
    return parser


def _save_metrics(controller: TrackerController) -> None:
    try:
        controller.metrics.save()
    except OSError as e:
        logger.error("Error saving metrics to %s: %s", controller.config.metrics_file, e)


def run_loop(controller: TrackerController, web: bool) -> None:
    global _running
    _running = True
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    config = controller.config
    os.makedirs(config.data_dir, exist_ok=True)
    logger.info("Watching %s every %.1fs", config.queue_file, config.poll_interval)

    watcher = QueueWatcher(config.queue_file)
    observer = None
    if config.watch_queue:
        os.makedirs(watcher.watched_dir, exist_ok=True)
        observer = Observer()
        observer.schedule(watcher, watcher.watched_dir, recursive=False)
        observer.start()

    if web:
        run_web(create_app(controller), config.web_host, config.web_port)

    logger.info(controller.status_text())
    last_metrics_save = time.time()

    try:
        while _running:
            controller.tick()

            now = time.time()
            if now - last_metrics_save >= config.metrics_interval:
                _save_metrics(controller)
                last_metrics_save = now

            watcher.wait(config.poll_interval)
    except KeyboardInterrupt:
        pass

    if observer is not None:
        observer.stop()
        observer.join(timeout=5)
    _save_metrics(controller)
    logger.info("Terminal Tracker stopped.")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [terminal-tracker] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1
    controller = TrackerController(config)

    if args.command == "run":
        run_loop(controller, web=config.web_enabled and not args.no_web)
    elif args.command == "poll":
        before = controller.metrics.get("events_logged")
        controller.poller.poll()
        print(f"Logged {controller.metrics.get('events_logged') - before} event(s)")
    elif args.command == "aggregate":
        summaries = controller.aggregator.aggregate()
        if summaries is None:
            if controller.command_log.exists():
                return 1
            print(NO_LOGS_NOTICE)
        else:
            print(f"Generated heatmap data with {len(summaries)} days of data")
    elif args.command == "today":
        stats = controller.today_stats()
        if args.output == "json":
            print(json.dumps(stats.to_dict(), indent=2))
        else:
            print(controller.status_text())
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except BrokenPipeError:
        sys.exit(0)
