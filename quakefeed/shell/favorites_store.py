"""Favorites Store - Imperative Shell.

This module handles persistence of favorite earthquake IDs to a local
JSON file, stored as a plain JSON array of strings.

All I/O is contained here; set logic is in the core module.
"""

import json
import logging
from pathlib import Path

from quakefeed.core.config import DEFAULT_FAVORITES_PATH, Config
from quakefeed.core.favorites import (
    parse_favorite_ids,
    serialize_favorite_ids,
    toggle_favorite,
)


logger = logging.getLogger(__name__)


class FavoritesStore:
    """Persists a set of favorite earthquake IDs.

    This is part of the imperative shell - it handles file I/O.
    A missing or corrupt file is treated as an empty set.
    """

    def __init__(self, path: str | Path = DEFAULT_FAVORITES_PATH) -> None:
        """Initialize favorites store.

        Args:
            path: JSON file holding the favorite IDs
        """
        self.path = Path(path)

    @classmethod
    def from_config(cls, config: Config) -> "FavoritesStore":
        """Build a store for the configured favorites file."""
        return cls(config.favorites_path)

    def load_ids(self) -> set[str]:
        """Load the set of favorite IDs.

        This method performs file I/O.

        Returns:
            Set of favorite earthquake IDs (empty if missing or corrupt)
        """
        if not self.path.exists():
            logger.info("No favorites file at %s", self.path)
            return set()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable favorites file %s: %s", self.path, e)
            return set()

        ids = parse_favorite_ids(data)
        logger.info("Loaded %d favorite IDs", len(ids))
        return ids

    def save_ids(self, ids: set[str]) -> bool:
        """Save the set of favorite IDs, replacing the stored set.

        This method performs file I/O.

        Args:
            ids: Set of earthquake IDs to save

        Returns:
            True if successful, False otherwise
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(serialize_favorite_ids(ids), f, indent=2)
        except OSError as e:
            logger.error("Failed to save favorites to %s: %s", self.path, e)
            return False

        logger.info("Saved %d favorite IDs", len(ids))
        return True

    def toggle(self, event_id: str) -> bool:
        """Toggle an ID in the stored set.

        Args:
            event_id: Earthquake ID to add or remove

        Returns:
            True if the ID is a favorite after the call
        """
        ids = toggle_favorite(self.load_ids(), event_id)
        self.save_ids(ids)
        return event_id in ids
