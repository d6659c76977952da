from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import requests

from src.timeclock.timeclock.core.exceptions import TimeSyncError
from src.timeclock.timeclock.timesync.client import WorldTimeClient
from src.timeclock.timeclock.timesync.source import TimeSource


class FakeAuthority:
    def __init__(self, clock, skew: timedelta):
        self.clock = clock
        self.skew = skew
        self.calls = 0
        self.fail = False

    def __call__(self, tz_name: str) -> datetime:
        self.calls += 1
        if self.fail:
            raise TimeSyncError("time authority unreachable")
        return self.clock() + self.skew


def test_now_is_local_time_until_first_sync(clock):
    source = TimeSource(local_clock=clock)

    assert source.now() == clock()
    assert source.offset is None
    assert source.sync() is False


def test_sync_applies_measured_offset(clock):
    authority = FakeAuthority(clock, timedelta(seconds=90))
    source = TimeSource(authority, local_clock=clock)

    assert source.sync() is True
    assert source.offset == timedelta(seconds=90)
    assert source.now() - clock() == timedelta(seconds=90)

    clock.advance(minutes=5)
    assert source.now() == clock() + timedelta(seconds=90)


def test_failed_sync_keeps_last_good_offset(clock):
    authority = FakeAuthority(clock, timedelta(seconds=-30))
    source = TimeSource(authority, local_clock=clock)
    source.sync()

    authority.fail = True
    authority.skew = timedelta(seconds=500)
    assert source.sync() is False
    assert source.now() == clock() - timedelta(seconds=30)


def test_failed_first_sync_falls_back_to_local_time(clock):
    authority = FakeAuthority(clock, timedelta(seconds=10))
    authority.fail = True
    source = TimeSource(authority, local_clock=clock)

    assert source.sync() is False
    assert source.now() == clock()


def test_resync_if_stale_respects_max_age(clock):
    authority = FakeAuthority(clock, timedelta(seconds=1))
    source = TimeSource(authority, local_clock=clock, max_age=timedelta(hours=1))

    assert source.resync_if_stale() is True
    assert authority.calls == 1

    clock.advance(minutes=59)
    assert source.resync_if_stale() is False
    assert authority.calls == 1

    clock.advance(minutes=2)
    assert source.resync_if_stale() is True
    assert authority.calls == 2


class FakeResponse:
    def __init__(self, payload=None, status_error=None):
        self._payload = payload
        self._status_error = status_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


def test_world_time_client_reads_utc_datetime():
    session = FakeSession(FakeResponse({"utc_datetime": "2025-03-03T14:00:05.250000+00:00"}))
    client = WorldTimeClient("http://time.example/api/timezone/", session=session)

    value = client.fetch_trusted_instant("America/New_York")

    assert session.urls == ["http://time.example/api/timezone/America/New_York"]
    assert value == datetime(2025, 3, 3, 14, 0, 5, 250000, tzinfo=timezone.utc)


def test_world_time_client_falls_back_to_local_datetime_field():
    session = FakeSession(FakeResponse({"datetime": "2025-03-03T09:00:00-05:00"}))
    client = WorldTimeClient("http://time.example", session=session)

    assert client.fetch_trusted_instant("America/New_York") == datetime(2025, 3, 3, 14, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("down")),
        FakeSession(FakeResponse(status_error=requests.HTTPError("503"))),
        FakeSession(FakeResponse({"unixtime": 1})),
        FakeSession(FakeResponse({"utc_datetime": "not a date"})),
    ],
)
def test_world_time_client_wraps_failures(session):
    client = WorldTimeClient("http://time.example", session=session)

    with pytest.raises(TimeSyncError):
        client.fetch_trusted_instant("UTC")


def test_time_source_survives_client_failure(clock):
    client = WorldTimeClient("http://time.example", session=FakeSession(error=requests.Timeout("slow")))
    source = TimeSource(client.fetch_trusted_instant, local_clock=clock)

    assert source.sync() is False
    assert source.now() == clock()
