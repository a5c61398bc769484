"""Earthquake Service - Background poller owning the current snapshot.

This module wires the functional core (parsing, ordering, status) to the
imperative shell (feed client, status server) and runs the repeating
fetch-parse-commit cycle on its own thread.

Thread-safety:
- The (records, status) pair lives in one immutable Snapshot, replaced
  under a single lock. The lock is never held across I/O.
- Whole cycles, timed or manual, are serialized by a separate cycle lock.
- Policy values (interval, minimum magnitude, sort flag) are independent
  scalars read at the start of each cycle. There is no cross-field
  atomicity: the newest write wins.
"""

import logging
import threading

from quakefeed.api_handler import StatusServer
from quakefeed.core.config import Config, DEFAULT_API_PORT, DEFAULT_POLLING_INTERVAL_SECONDS
from quakefeed.core.earthquake import Earthquake, parse_feed, sort_by_magnitude
from quakefeed.core.status import (
    STATUS_CONNECTION_FAILED,
    STATUS_FETCHING,
    STATUS_UNEXPECTED_ERROR,
    Snapshot,
    format_updated_status,
)
from quakefeed.shell.usgs_client import USGSClient


logger = logging.getLogger(__name__)


class EarthquakeService:
    """Polls the USGS feed in the background and publishes snapshots.

    States: Stopped (initial) and Running. start() and stop() are
    idempotent; stop() waits for the worker thread and the status
    server (if any) to exit.
    """

    def __init__(
        self,
        feed_client: USGSClient | None = None,
        polling_interval_seconds: int = DEFAULT_POLLING_INTERVAL_SECONDS,
        min_magnitude: float = 0.0,
        sort_by_magnitude: bool = True,
    ) -> None:
        """Initialize the service in the Stopped state.

        Args:
            feed_client: USGS client (created if not provided)
            polling_interval_seconds: Seconds between timed cycles
            min_magnitude: Minimum magnitude admitted when parsing
            sort_by_magnitude: Order snapshots by descending magnitude
        """
        self.feed_client = feed_client or USGSClient()

        self._polling_interval_seconds = polling_interval_seconds
        self._min_magnitude = min_magnitude
        self._sort_by_magnitude = sort_by_magnitude

        self._lock = threading.Lock()
        self._snapshot = Snapshot()

        self._cycle_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._status_server: StatusServer | None = None

    @classmethod
    def from_config(cls, config: Config) -> "EarthquakeService":
        """Build a service and its feed client from configuration."""
        return cls(
            feed_client=USGSClient(
                feed_url=config.feed_url,
                timeout=config.request_timeout_seconds,
            ),
            polling_interval_seconds=config.polling_interval_seconds,
            min_magnitude=config.min_magnitude,
            sort_by_magnitude=config.sort_by_magnitude,
        )

    # ----- Lifecycle -----

    @property
    def is_running(self) -> bool:
        """True while the polling thread is running."""
        return self._thread is not None

    def start(self, interval_seconds: int | None = None) -> None:
        """Start the background poll loop.

        The first cycle runs immediately. Calling start() while already
        running does nothing.

        Args:
            interval_seconds: Overrides the polling interval if given
        """
        with self._lifecycle_lock:
            if self._thread is not None:
                logger.debug("Service already running, ignoring start()")
                return

            if interval_seconds is not None:
                self.set_polling_interval(interval_seconds)

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                name="quakefeed-poller",
            )
            self._thread.start()

        logger.info(
            "Started polling every %ds",
            self._polling_interval_seconds,
        )

    def stop(self) -> None:
        """Stop the poll loop and the status server, waiting for both.

        A fetch already in flight is allowed to finish first.
        """
        with self._lifecycle_lock:
            self._stop_event.set()

            thread = self._thread
            if thread is not None:
                thread.join()
                self._thread = None
                logger.info("Stopped polling")

            if self._status_server is not None:
                self._status_server.stop()
                self._status_server = None

    def start_api_server(
        self,
        port: int = DEFAULT_API_PORT,
        host: str = "0.0.0.0",
    ) -> StatusServer:
        """Start the status endpoint, owned by this service.

        Args:
            port: Port to listen on (0 picks a free port)
            host: Interface to bind

        Returns:
            The running StatusServer (the existing one if already started)
        """
        with self._lifecycle_lock:
            if self._status_server is None:
                server = StatusServer(self, host=host, port=port)
                server.start()
                self._status_server = server
            return self._status_server

    def _run(self) -> None:
        """Worker loop: one cycle per interval until stopped."""
        while not self._stop_event.is_set():
            try:
                self.fetch_now()
            except Exception:
                logger.exception("Unexpected error in poll cycle")
                self._publish_status(STATUS_UNEXPECTED_ERROR)

            # Interval is re-read every cycle; set() wakes the wait early
            self._stop_event.wait(self._polling_interval_seconds)

    # ----- Cycle -----

    def fetch_now(self) -> Snapshot:
        """Run one fetch-parse-commit cycle on the caller's thread.

        Shares the cycle lock with the timed loop, so cycles never
        overlap. On a failed fetch the previous records are kept.

        Returns:
            The snapshot committed by this cycle
        """
        with self._cycle_lock:
            self._publish_status(STATUS_FETCHING)

            response = self.feed_client.fetch()

            if not response.success:
                logger.warning("Feed fetch failed: %s", response.error)
                return self._publish_status(STATUS_CONNECTION_FAILED)

            earthquakes = parse_feed(response.body, self._min_magnitude)

            if self._sort_by_magnitude:
                earthquakes = sort_by_magnitude(earthquakes)

            snapshot = self._commit(earthquakes)

        logger.info("Committed snapshot: %s", snapshot.status)
        return snapshot

    def _publish_status(self, status: str) -> Snapshot:
        """Replace the status, keeping the committed records."""
        with self._lock:
            self._snapshot = Snapshot(records=self._snapshot.records, status=status)
            return self._snapshot

    def _commit(self, earthquakes: list[Earthquake]) -> Snapshot:
        """Replace records and status together."""
        snapshot = Snapshot(
            records=tuple(earthquakes),
            status=format_updated_status(len(earthquakes)),
        )
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    # ----- Accessors -----

    def get_snapshot(self) -> Snapshot:
        """Current (records, status) pair, read in one acquisition."""
        with self._lock:
            return self._snapshot

    def get_records(self) -> list[Earthquake]:
        """Copy of the committed records."""
        with self._lock:
            return list(self._snapshot.records)

    def get_status(self) -> str:
        """Current status string, e.g. "Updated: 3 quakes"."""
        with self._lock:
            return self._snapshot.status

    @property
    def polling_interval_seconds(self) -> int:
        """Seconds between timed cycles."""
        return self._polling_interval_seconds

    @property
    def min_magnitude(self) -> float:
        """Admission threshold for the next cycle."""
        return self._min_magnitude

    @property
    def sort_by_magnitude(self) -> bool:
        """Whether the next cycle orders records by descending magnitude."""
        return self._sort_by_magnitude

    def set_polling_interval(self, seconds: int) -> None:
        """Set the interval used from the next wait onwards.

        Raises:
            ValueError: If seconds is not positive
        """
        if seconds <= 0:
            raise ValueError(f"Polling interval must be positive, got {seconds}")
        self._polling_interval_seconds = seconds

    def set_minimum_magnitude(self, magnitude: float) -> None:
        """Set the admission threshold used by the next parse."""
        self._min_magnitude = float(magnitude)

    def set_sort_by_magnitude(self, enabled: bool) -> None:
        """Enable or disable magnitude ordering for the next cycle."""
        self._sort_by_magnitude = bool(enabled)
