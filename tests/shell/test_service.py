"""Tests for the EarthquakeService poller.

Tests the fetch-parse-commit cycle, the thread-safety contract and the
start/stop lifecycle. Uses fake feed clients instead of HTTP.
"""

import json
import threading
import time
from unittest.mock import Mock

import pytest

from quakefeed.core.config import Config
from quakefeed.core.earthquake import Earthquake
from quakefeed.core.status import STATUS_IDLE
from quakefeed.service import EarthquakeService
from quakefeed.shell.usgs_client import FeedResponse, USGSClient


def make_body(*magnitudes: float) -> bytes:
    """Feed body with one feature per magnitude, ids q0, q1, ..."""
    return json.dumps({
        "features": [
            {
                "id": f"q{i}",
                "properties": {"mag": mag, "place": f"place {i}", "time": 1000 + i},
                "geometry": {"coordinates": [float(i), float(-i), 5.0]},
            }
            for i, mag in enumerate(magnitudes)
        ]
    }).encode()


def ok(body: bytes) -> FeedResponse:
    return FeedResponse(success=True, body=body, status_code=200)


FAILED = FeedResponse(success=False, error="connection refused")


class GatedFeedClient:
    """Feed client whose fetch() blocks until released."""

    def __init__(self, body: bytes) -> None:
        self.body = body
        self.entered = threading.Event()
        self.release = threading.Event()

    def fetch(self) -> FeedResponse:
        self.entered.set()
        self.release.wait(5)
        return ok(self.body)


class CountingFeedClient:
    """Feed client that records how many fetches overlap."""

    def __init__(self, body: bytes, delay: float = 0.02) -> None:
        self.body = body
        self.delay = delay
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def fetch(self) -> FeedResponse:
        with self._lock:
            self.calls += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        time.sleep(self.delay)
        with self._lock:
            self.in_flight -= 1
        return ok(self.body)


def wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def feed_client():
    client = Mock()
    client.fetch.return_value = ok(make_body(2.0, 5.0, 3.0))
    return client


@pytest.fixture
def service(feed_client):
    svc = EarthquakeService(feed_client=feed_client)
    yield svc
    svc.stop()


class TestInitialState:
    def test_starts_idle_and_empty(self, service):
        assert service.get_status() == STATUS_IDLE
        assert service.get_records() == []
        assert service.is_running is False

    def test_default_policy(self, service):
        assert service.polling_interval_seconds == 15
        assert service.min_magnitude == 0.0
        assert service.sort_by_magnitude is True

    @pytest.mark.parametrize("name", [
        "is_running",
        "get_status",
        "polling_interval_seconds",
        "min_magnitude",
        "sort_by_magnitude",
    ])
    def test_public_accessors_are_documented(self, name):
        assert getattr(EarthquakeService, name).__doc__

    def test_creates_default_feed_client(self):
        assert isinstance(EarthquakeService().feed_client, USGSClient)

    def test_from_config(self):
        config = Config(
            polling_interval_seconds=42,
            min_magnitude=2.5,
            sort_by_magnitude=False,
            feed_url="https://example.com/feed.geojson",
            request_timeout_seconds=7,
        )

        svc = EarthquakeService.from_config(config)

        assert svc.polling_interval_seconds == 42
        assert svc.min_magnitude == 2.5
        assert svc.sort_by_magnitude is False
        assert svc.feed_client.feed_url == "https://example.com/feed.geojson"
        assert svc.feed_client.timeout == 7


class TestFetchNow:
    """Tests for the manual fetch cycle."""

    def test_successful_cycle_commits_sorted_records(self, service):
        snapshot = service.fetch_now()

        assert snapshot.status == "Updated: 3 quakes"
        assert service.get_status() == "Updated: 3 quakes"
        assert [e.magnitude for e in service.get_records()] == [5.0, 3.0, 2.0]

    def test_unsorted_keeps_feed_order(self, service):
        service.set_sort_by_magnitude(False)

        service.fetch_now()

        assert [e.id for e in service.get_records()] == ["q0", "q1", "q2"]

    def test_sort_is_stable_on_ties(self, service, feed_client):
        feed_client.fetch.return_value = ok(make_body(2.0, 4.0, 2.0, 4.0, 2.0))

        service.fetch_now()

        assert [e.id for e in service.get_records()] == ["q1", "q3", "q0", "q2", "q4"]

    def test_uses_current_minimum_magnitude(self, service):
        service.set_minimum_magnitude(3.0)

        service.fetch_now()

        records = service.get_records()
        assert [e.magnitude for e in records] == [5.0, 3.0]
        assert service.get_status() == "Updated: 2 quakes"

    def test_threshold_change_applies_to_next_cycle(self, service):
        service.fetch_now()
        service.set_minimum_magnitude(4.0)

        assert len(service.get_records()) == 3

        service.fetch_now()

        assert len(service.get_records()) == 1

    def test_failed_fetch_keeps_previous_records(self, service, feed_client):
        service.fetch_now()
        before = service.get_records()

        feed_client.fetch.return_value = FAILED
        snapshot = service.fetch_now()

        assert snapshot.status == "Error: Connection failed"
        assert service.get_status() == "Error: Connection failed"
        assert service.get_records() == before

    def test_recovers_after_failure(self, service, feed_client):
        feed_client.fetch.return_value = FAILED
        service.fetch_now()
        feed_client.fetch.return_value = ok(make_body(1.0))

        service.fetch_now()

        assert service.get_status() == "Updated: 1 quakes"

    def test_malformed_body_commits_empty_snapshot(self, service, feed_client):
        service.fetch_now()
        feed_client.fetch.return_value = ok(b"<html>maintenance</html>")

        service.fetch_now()

        assert service.get_records() == []
        assert service.get_status() == "Updated: 0 quakes"

    def test_publishes_fetching_during_fetch(self):
        client = GatedFeedClient(make_body(4.0))
        svc = EarthquakeService(feed_client=client)
        client.release.set()
        svc.fetch_now()
        client.release.clear()
        client.entered.clear()
        client.body = make_body(1.0, 2.0)

        worker = threading.Thread(target=svc.fetch_now)
        worker.start()
        assert client.entered.wait(5)

        snapshot = svc.get_snapshot()
        assert snapshot.status == "Fetching..."
        assert [e.magnitude for e in snapshot.records] == [4.0]

        client.release.set()
        worker.join(5)
        assert svc.get_status() == "Updated: 2 quakes"


class TestAccessors:
    """Tests for the read accessors."""

    def test_get_records_returns_copy(self, service):
        service.fetch_now()

        records = service.get_records()
        records.clear()

        assert len(service.get_records()) == 3

    def test_snapshot_pairs_records_and_status(self, service):
        service.fetch_now()

        snapshot = service.get_snapshot()

        assert snapshot.status == f"Updated: {len(snapshot.records)} quakes"
        assert all(isinstance(e, Earthquake) for e in snapshot.records)

    def test_published_snapshot_is_never_mutated(self, service, feed_client):
        service.fetch_now()
        first = service.get_snapshot()

        feed_client.fetch.return_value = ok(make_body(9.0))
        service.fetch_now()

        assert first.count == 3
        assert first.status == "Updated: 3 quakes"

    def test_set_polling_interval_rejects_non_positive(self, service):
        with pytest.raises(ValueError):
            service.set_polling_interval(0)

        assert service.polling_interval_seconds == 15


class TestLifecycle:
    """Tests for start()/stop()."""

    def test_start_runs_first_cycle_immediately(self):
        client = CountingFeedClient(make_body(3.0))
        svc = EarthquakeService(feed_client=client, polling_interval_seconds=3600)

        svc.start()
        try:
            assert wait_for(lambda: svc.get_status() == "Updated: 1 quakes")
            assert svc.is_running is True
        finally:
            svc.stop()

        assert svc.is_running is False

    def test_start_is_idempotent(self):
        client = CountingFeedClient(make_body(3.0))
        svc = EarthquakeService(feed_client=client, polling_interval_seconds=3600)

        svc.start()
        svc.start()
        try:
            assert wait_for(lambda: client.calls >= 1)
            time.sleep(0.1)
            assert client.calls == 1
        finally:
            svc.stop()

    def test_stop_returns_promptly_during_long_interval(self):
        client = CountingFeedClient(make_body(3.0))
        svc = EarthquakeService(feed_client=client, polling_interval_seconds=3600)
        svc.start()
        assert wait_for(lambda: client.calls >= 1)

        started = time.monotonic()
        svc.stop()

        assert time.monotonic() - started < 1.0
        assert not any(t.name == "quakefeed-poller" for t in threading.enumerate())

    def test_stop_when_not_running_is_noop(self, service):
        service.stop()
        service.stop()

        assert service.is_running is False

    def test_start_overrides_interval(self):
        client = CountingFeedClient(make_body(3.0))
        svc = EarthquakeService(feed_client=client, polling_interval_seconds=3600)

        svc.start(interval_seconds=1)
        try:
            assert wait_for(lambda: client.calls >= 2, timeout=5)
            assert svc.polling_interval_seconds == 1
        finally:
            svc.stop()

    def test_restart_resumes_polling(self):
        client = CountingFeedClient(make_body(3.0))
        svc = EarthquakeService(feed_client=client, polling_interval_seconds=3600)

        svc.start()
        assert wait_for(lambda: client.calls >= 1)
        svc.stop()
        calls_after_stop = client.calls

        svc.start()
        try:
            assert wait_for(lambda: client.calls > calls_after_stop)
        finally:
            svc.stop()

    def test_manual_and_timed_cycles_never_overlap(self):
        client = CountingFeedClient(make_body(3.0, 4.0), delay=0.01)
        svc = EarthquakeService(feed_client=client, polling_interval_seconds=1)

        svc.start()
        try:
            workers = [threading.Thread(target=svc.fetch_now) for _ in range(8)]
            for worker in workers:
                worker.start()
            for worker in workers:
                worker.join(5)
        finally:
            svc.stop()

        assert client.calls >= 8
        assert client.max_in_flight == 1
        assert svc.get_status() == "Updated: 2 quakes"

    def test_unexpected_error_does_not_kill_loop(self):
        errors = iter([RuntimeError("boom")])

        def fetch():
            for error in errors:
                raise error
            return ok(make_body(1.0))

        client = Mock()
        client.fetch.side_effect = fetch
        svc = EarthquakeService(feed_client=client, polling_interval_seconds=1)

        svc.start()
        try:
            assert wait_for(lambda: svc.get_status() == "Updated: 1 quakes", timeout=5)
        finally:
            svc.stop()

    def test_stop_shuts_down_status_server(self, service):
        server = service.start_api_server(port=0, host="127.0.0.1")
        assert server.is_running is True

        service.stop()

        assert server.is_running is False
