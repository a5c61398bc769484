#!/usr/bin/env python3
"""List earthquakes from the current USGS feed.

Runs one fetch cycle and prints the snapshot, marking favorites.
Favorites can be toggled by event ID.

Usage:
    # List today's earthquakes, largest first
    python scripts/list_earthquakes.py

    # Only M4.5+, in feed order
    python scripts/list_earthquakes.py --min-magnitude 4.5 --feed-order

    # Toggle a favorite, then list only favorites
    python scripts/list_earthquakes.py --toggle nc75106941 --favorites-only

Configuration:
    --config or CONFIG_PATH names a YAML file; otherwise settings such as
    FAVORITES_PATH and MIN_MAGNITUDE come from the environment.
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quakefeed.core.config import Config
from quakefeed.core.favorites import filter_favorites
from quakefeed.service import EarthquakeService
from quakefeed.shell.favorites_store import FavoritesStore
from quakefeed.shell.config_loader import load_config, load_config_from_env

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _get_config(config_path: str | None) -> Config:
    if config_path:
        return load_config(config_path)
    elif os.environ.get("CONFIG_PATH"):
        return load_config()
    else:
        return load_config_from_env()


def main() -> int:
    parser = argparse.ArgumentParser(description="List current USGS earthquakes")
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--min-magnitude", type=float)
    parser.add_argument("--feed-order", action="store_true", help="Do not sort by magnitude")
    parser.add_argument("--limit", type=int, default=20)
    parser.add_argument("--toggle", metavar="EVENT_ID", help="Toggle a favorite")
    parser.add_argument("--favorites-only", action="store_true")
    args = parser.parse_args()

    config = _get_config(args.config)
    if args.min_magnitude is not None:
        config.min_magnitude = args.min_magnitude
    if args.feed_order:
        config.sort_by_magnitude = False

    store = FavoritesStore.from_config(config)

    if args.toggle:
        is_favorite = store.toggle(args.toggle)
        print(f"{args.toggle}: {'added to' if is_favorite else 'removed from'} favorites")

    service = EarthquakeService.from_config(config)
    snapshot = service.fetch_now()
    print(snapshot.status)

    favorites = store.load_ids()
    earthquakes = list(snapshot.records)
    if args.favorites_only:
        earthquakes = filter_favorites(earthquakes, favorites)

    for i, eq in enumerate(earthquakes[:args.limit], 1):
        marker = "*" if eq.id in favorites else " "
        when = eq.event_time.strftime("%Y-%m-%d %H:%M") if eq.event_time else "unknown"
        print(f"{i:3d}. {marker} M{eq.magnitude:.1f}  {when}  {eq.place}  ({eq.id})")

    return 0 if snapshot.status.startswith("Updated") else 1


if __name__ == "__main__":
    sys.exit(main())
