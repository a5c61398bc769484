"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS feed client (HTTP)
- Favorites store (local JSON file)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from quakefeed.shell.usgs_client import USGSClient, FeedResponse
from quakefeed.shell.favorites_store import FavoritesStore
from quakefeed.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "USGSClient",
    "FeedResponse",
    "FavoritesStore",
    "load_config",
    "load_config_from_env",
]
