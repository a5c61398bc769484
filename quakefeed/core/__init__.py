"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Earthquake feed parsing and ordering
- Snapshot status reporting
- Favorite ID set handling
- Configuration validation

All functions here are deterministic and have no I/O.
"""

from quakefeed.core.earthquake import (
    Earthquake,
    parse_feed,
    parse_earthquakes,
    sort_by_magnitude,
)
from quakefeed.core.status import Snapshot, build_status_summary
from quakefeed.core.favorites import parse_favorite_ids, toggle_favorite
from quakefeed.core.config import Config, validate_config

__all__ = [
    # Earthquake
    "Earthquake",
    "parse_feed",
    "parse_earthquakes",
    "sort_by_magnitude",
    # Status
    "Snapshot",
    "build_status_summary",
    # Favorites
    "parse_favorite_ids",
    "toggle_favorite",
    # Config
    "Config",
    "validate_config",
]
