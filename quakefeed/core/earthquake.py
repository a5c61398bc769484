"""Earthquake data models and parsing - Pure functions.

This module handles parsing the USGS GeoJSON feed into typed Earthquake
objects. All functions are pure with no side effects.

Parsing never fails the caller: a malformed feed is treated as
"no data this cycle" and yields an empty list.
"""

import json
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class Earthquake:
    """Immutable earthquake data model.

    Attributes:
        id: USGS event ID (opaque, may be empty)
        magnitude: Earthquake magnitude
        place: Human-readable location description (may be empty)
        time: Event timestamp in milliseconds since epoch (0 if unknown)
        longitude: Epicenter longitude
        latitude: Epicenter latitude
        depth_km: Depth in kilometers
    """
    id: str = ""
    magnitude: float = 0.0
    place: str = ""
    time: int = 0
    longitude: float = 0.0
    latitude: float = 0.0
    depth_km: float = 0.0

    @property
    def event_time(self) -> datetime | None:
        """Event time as a UTC datetime, or None if the feed had no time."""
        if not self.time:
            return None
        try:
            return datetime.fromtimestamp(self.time / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid magnitude or coordinate;
    # JSON also admits NaN and overflowing literals that decode to inf
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False


def parse_earthquake(feature: Any) -> Earthquake | None:
    """Parse a single GeoJSON feature into an Earthquake.

    Each field is optional on its own: a missing, null or wrongly typed
    value keeps the Earthquake default instead of rejecting the record.

    Args:
        feature: GeoJSON feature dict from the USGS feed

    Returns:
        Earthquake object, or None if the feature is not an object
    """
    if not isinstance(feature, dict):
        return None

    fields: dict[str, Any] = {}

    event_id = feature.get("id")
    if isinstance(event_id, str):
        fields["id"] = event_id

    props = feature.get("properties")
    if isinstance(props, dict):
        magnitude = props.get("mag")
        if _is_number(magnitude):
            fields["magnitude"] = float(magnitude)

        place = props.get("place")
        if isinstance(place, str):
            fields["place"] = place

        # USGS uses milliseconds since epoch
        time_ms = props.get("time")
        if _is_number(time_ms):
            fields["time"] = int(time_ms)

    geometry = feature.get("geometry")
    if isinstance(geometry, dict):
        coords = geometry.get("coordinates")
        if (
            isinstance(coords, list)
            and len(coords) >= 3
            and all(_is_number(c) for c in coords[:3])
        ):
            fields["longitude"] = float(coords[0])
            fields["latitude"] = float(coords[1])
            fields["depth_km"] = float(coords[2])

    return Earthquake(**fields)


def parse_earthquakes(
    geojson: Any,
    min_magnitude: float = 0.0,
) -> list[Earthquake]:
    """Parse a USGS GeoJSON FeatureCollection into a list of Earthquakes.

    Applies the minimum-magnitude admission filter. Output order matches
    the order of the input features.

    Args:
        geojson: Decoded GeoJSON document
        min_magnitude: Records below this magnitude are dropped

    Returns:
        List of admitted Earthquake objects (empty if the document is
        not a FeatureCollection-like object)
    """
    if not isinstance(geojson, dict):
        return []

    features = geojson.get("features")
    if not isinstance(features, list):
        return []

    earthquakes = []
    for feature in features:
        earthquake = parse_earthquake(feature)
        if earthquake is not None and earthquake.magnitude >= min_magnitude:
            earthquakes.append(earthquake)

    return earthquakes


def parse_feed(body: bytes | str, min_magnitude: float = 0.0) -> list[Earthquake]:
    """Parse a raw feed response body.

    Args:
        body: Raw response body (JSON text)
        min_magnitude: Minimum magnitude admission threshold

    Returns:
        List of admitted Earthquake objects; empty for malformed bodies
    """
    try:
        geojson = json.loads(body)
    except (TypeError, ValueError, RecursionError):
        return []

    return parse_earthquakes(geojson, min_magnitude)


def sort_by_magnitude(earthquakes: list[Earthquake]) -> list[Earthquake]:
    """Order earthquakes by descending magnitude.

    Stable: equal magnitudes keep their input order.
    """
    return sorted(earthquakes, key=lambda e: e.magnitude, reverse=True)

