"""Configuration loading from an optional YAML file and environment variables.

Precedence: environment > YAML > defaults.

    storage:
      data_dir: ~/.terminal-tracker
      queue_filename: cmds.txt
      log_filename: terminal-commands.log
      snapshot_filename: heatmap-data.json
    poller:
      interval: 3.0
      watch_queue: true
      metrics_interval: 10
    web:
      enabled: true
      host: 127.0.0.1
      port: 5055
"""

import logging
import os
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.join(os.path.expanduser("~"), ".terminal-tracker")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    data_dir: str = DEFAULT_DATA_DIR
    queue_filename: str = "cmds.txt"
    log_filename: str = "terminal-commands.log"
    snapshot_filename: str = "heatmap-data.json"
    metrics_filename: str = ".tracker_metrics.json"
    poll_interval: float = 3.0
    watch_queue: bool = True
    metrics_interval: int = 10
    web_enabled: bool = True
    web_host: str = "127.0.0.1"
    web_port: int = 5055

    @property
    def queue_file(self) -> str:
        return os.path.join(self.data_dir, self.queue_filename)

    @property
    def log_file(self) -> str:
        return os.path.join(self.data_dir, self.log_filename)

    @property
    def snapshot_file(self) -> str:
        return os.path.join(self.data_dir, self.snapshot_filename)

    @property
    def metrics_file(self) -> str:
        return os.path.join(self.data_dir, self.metrics_filename)


def load_yaml_config(path: str | None) -> dict:
    """Read the YAML config file. Missing or invalid files yield an empty dict."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML in %s, using defaults: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(path: str | None = None) -> Config:
    """Build Config from the YAML file at *path* (or $TRACKER_CONFIG) and the environment."""
    yaml_data = load_yaml_config(path or os.environ.get("TRACKER_CONFIG"))
    storage = yaml_data.get("storage") or {}
    poller = yaml_data.get("poller") or {}
    web = yaml_data.get("web") or {}

    data_dir = os.environ.get("TRACKER_DATA_DIR", storage.get("data_dir", Config.data_dir))
    poll_interval = float(
        os.environ.get("TRACKER_POLL_INTERVAL", poller.get("interval", Config.poll_interval))
    )
    if poll_interval <= 0:
        raise ValueError(f"poll interval must be positive, got {poll_interval}")

    return Config(
        data_dir=os.path.expanduser(data_dir),
        queue_filename=storage.get("queue_filename", Config.queue_filename),
        log_filename=storage.get("log_filename", Config.log_filename),
        snapshot_filename=storage.get("snapshot_filename", Config.snapshot_filename),
        metrics_filename=storage.get("metrics_filename", Config.metrics_filename),
        poll_interval=poll_interval,
        watch_queue=_parse_bool(
            os.environ.get("TRACKER_WATCH_QUEUE", poller.get("watch_queue", Config.watch_queue))
        ),
        metrics_interval=int(poller.get("metrics_interval", Config.metrics_interval)),
        web_enabled=_parse_bool(
            os.environ.get("TRACKER_WEB_ENABLED", web.get("enabled", Config.web_enabled))
        ),
        web_host=os.environ.get("TRACKER_WEB_HOST", web.get("host", Config.web_host)),
        web_port=int(os.environ.get("TRACKER_WEB_PORT", web.get("port", Config.web_port))),
    )
