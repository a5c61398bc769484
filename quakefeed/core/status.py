"""Snapshot and status reporting - Pure functions.

The service publishes one Snapshot at a time: the records from the last
successful cycle together with a status string describing the most
recent cycle outcome.
"""

from dataclasses import dataclass
from typing import Any

from quakefeed.core.earthquake import Earthquake


STATUS_IDLE = "Idle"
STATUS_FETCHING = "Fetching..."
STATUS_CONNECTION_FAILED = "Error: Connection failed"
STATUS_UNEXPECTED_ERROR = "Error: Unexpected failure"


@dataclass(frozen=True)
class Snapshot:
    """Immutable (records, status) pair published by the service.

    Attributes:
        records: Earthquakes committed by the last successful cycle
        status: Outcome of the most recent cycle
    """
    records: tuple[Earthquake, ...] = ()
    status: str = STATUS_IDLE

    @property
    def count(self) -> int:
        return len(self.records)


def format_updated_status(count: int) -> str:
    """Status published after a successful cycle."""
    return f"Updated: {count} quakes"


def build_status_summary(snapshot: Snapshot) -> dict[str, Any]:
    """Build the status endpoint payload for a snapshot.

    Pure function.

    Args:
        snapshot: Snapshot to summarize

    Returns:
        Dict with status and count, plus a "latest" summary of the first
        record when the snapshot is non-empty
    """
    summary: dict[str, Any] = {
        "status": snapshot.status,
        "count": snapshot.count,
    }

    if snapshot.records:
        first = snapshot.records[0]
        summary["latest"] = {
            "place": first.place,
            "mag": first.magnitude,
        }

    return summary
