"""Command-line entry point.

Loads configuration, then either runs a single fetch cycle (--once) or
runs the background service with its status endpoint until interrupted.
"""

import argparse
import json
import logging
import os
import signal
import sys
import threading

from quakefeed.core.config import Config, validate_config
from quakefeed.core.status import build_status_summary
from quakefeed.service import EarthquakeService
from quakefeed.shell.config_loader import load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _get_config(config_path: str | None) -> Config:
    """Load configuration from file or environment."""
    if config_path:
        return load_config(config_path)
    elif os.environ.get("CONFIG_PATH"):
        return load_config()
    else:
        return load_config_from_env()


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line overrides on top of loaded configuration."""
    if args.interval is not None:
        config.polling_interval_seconds = args.interval
    if args.min_magnitude is not None:
        config.min_magnitude = args.min_magnitude
    if args.no_sort:
        config.sort_by_magnitude = False
    if args.port is not None:
        config.api_port = args.port
    if args.no_api:
        config.api_enabled = False
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Poll the USGS earthquake feed and serve a status summary",
    )
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--interval", type=int, help="Polling interval in seconds")
    parser.add_argument("--min-magnitude", type=float, help="Minimum magnitude to keep")
    parser.add_argument("--no-sort", action="store_true", help="Keep feed order")
    parser.add_argument("--port", type=int, help="Status endpoint port")
    parser.add_argument("--no-api", action="store_true", help="Do not start the status endpoint")
    parser.add_argument("--once", action="store_true", help="Fetch once, print summary and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = _apply_overrides(_get_config(args.config), args)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("Config %s: %s", error.field, error.message)
        return 2

    service = EarthquakeService.from_config(config)

    if args.once:
        snapshot = service.fetch_now()
        print(json.dumps(build_status_summary(snapshot), indent=2))
        return 0 if snapshot.status.startswith("Updated") else 1

    shutdown = threading.Event()

    def _handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down", signum)
        shutdown.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    if config.api_enabled:
        try:
            service.start_api_server(port=config.api_port, host=config.api_host)
        except OSError as e:
            logger.error("Could not start status API on port %d: %s", config.api_port, e)
            return 1

    service.start()

    try:
        shutdown.wait()
    finally:
        service.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
