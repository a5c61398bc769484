"""Favorite event IDs - Pure functions.

Logic for the key-set of favorite earthquake IDs kept by presentation
layers. Persistence is handled by the imperative shell
(favorites_store); this module only contains the pure logic.
"""

from typing import Any

from quakefeed.core.earthquake import Earthquake


def parse_favorite_ids(data: Any) -> set[str]:
    """Convert decoded JSON into a set of favorite IDs.

    Pure function. Anything other than a JSON array yields an empty set;
    non-string entries are skipped.

    Args:
        data: Decoded JSON document

    Returns:
        Set of favorite earthquake IDs
    """
    if not isinstance(data, list):
        return set()
    return {item for item in data if isinstance(item, str)}


def serialize_favorite_ids(ids: set[str]) -> list[str]:
    """Convert a set of IDs into a stable JSON-serializable list."""
    return sorted(ids)


def toggle_favorite(ids: set[str], event_id: str) -> set[str]:
    """Return a new set with event_id added, or removed if already present.

    Pure function.

    Args:
        ids: Current favorite IDs
        event_id: ID to toggle

    Returns:
        New set of favorite IDs
    """
    if event_id in ids:
        return ids - {event_id}
    return ids | {event_id}


def filter_favorites(
    earthquakes: list[Earthquake],
    favorite_ids: set[str],
) -> list[Earthquake]:
    """Keep only earthquakes whose ID is a favorite."""
    return [e for e in earthquakes if e.id in favorite_ids]
