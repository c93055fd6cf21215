import json

import pytest

from core.errors import QueryError
from core.models import EntryInfo, StoreRecord


class FakeStore:
    """In-memory RecordStore that replays canned records per entry."""

    def __init__(self, records=None, entries=None, fail_with=None):
        self.records = records or {}
        self.entries = entries or []
        self.fail_with = fail_with
        self.calls = []

    def query(self, entry, start, stop, callback, *, when=None, ext=None):
        self.calls.append({"entry": entry, "start": start, "stop": stop,
                           "when": when, "ext": ext})
        if self.fail_with is not None:
            raise self.fail_with
        if entry not in self.records:
            raise QueryError(f"Entry '{entry}' not found")
        delivered = 0
        for record in self.records[entry]:
            delivered += 1
            if not callback(record):
                break
        return delivered

    def list_entries(self):
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.entries)


def json_record(payload, ts=0, **kwargs):
    return StoreRecord(blob=json.dumps(payload).encode(), timestamp=ts,
                       content_type="application/json", **kwargs)


def csv_record(text, ts=0):
    return StoreRecord(blob=text.encode(), timestamp=ts, content_type="text/csv")


def imu_row(ts_ns, x, y, z):
    return {
        "ts_ns": ts_ns,
        "linear_acceleration_x": x,
        "linear_acceleration_y": y,
        "linear_acceleration_z": z,
    }


@pytest.fixture
def fake_store():
    return FakeStore


@pytest.fixture
def entry_info():
    return EntryInfo(
        name="csv__vectornav_IMU",
        size=2048,
        record_count=12,
        oldest_record=1_700_000_000_000_000,
        latest_record=1_700_000_060_000_000,
    )
