import pytest

import store.reduct_store as reduct_store
from core.errors import QueryError
from store.reduct_store import ReductRecordStore


class FakeReductError(Exception):
    pass


class FakeRecord:
    def __init__(self, ts, blob, content_type="application/json", labels=None):
        self.timestamp = ts
        self.size = len(blob)
        self.content_type = content_type
        self.labels = labels or {}
        self._blob = blob

    async def read_all(self):
        return self._blob


class FakeEntry:
    def __init__(self, name):
        self.name = name
        self.size = 100
        self.block_count = 1
        self.record_count = 3
        self.oldest_record = 1_000
        self.latest_record = 2_000


class FakeBucket:
    def __init__(self, client):
        self.client = client

    async def _records(self, entry, kwargs):
        self.client.queries.append((entry, kwargs))
        for rec in self.client.records:
            yield rec

    def query(self, entry, **kwargs):
        if entry == "missing":
            raise FakeReductError("Entry 'missing' not found")
        return self._records(entry, kwargs)

    async def get_entry_list(self):
        return [FakeEntry("a"), FakeEntry("b")]


class FakeClient:
    instances = []

    def __init__(self, url, **kwargs):
        self.url = url
        self.kwargs = kwargs
        self.queries = []
        self.records = [FakeRecord(i, f"blob{i}".encode()) for i in range(3)]
        FakeClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def get_bucket(self, name):
        if name == "nope":
            raise FakeReductError("Bucket 'nope' is not found")
        return FakeBucket(self)


@pytest.fixture(autouse=True)
def fake_client(monkeypatch):
    FakeClient.instances = []
    monkeypatch.setattr(reduct_store, "_import_client", lambda: (FakeClient, FakeReductError))


def test_query_delivers_records_in_order():
    store = ReductRecordStore("http://store:8383", "bucket", api_token="t", timeout=5)
    seen = []
    count = store.query("imu", 1, 2, lambda r: seen.append(r) or True,
                        when={"$limit": 3}, ext='{"ros": {}}')
    assert count == 3
    assert [r.blob for r in seen] == [b"blob0", b"blob1", b"blob2"]
    assert seen[0].size == 5

    client = FakeClient.instances[0]
    assert client.kwargs == {"api_token": "t", "timeout": 5}
    entry, kwargs = client.queries[0]
    assert entry == "imu"
    assert kwargs == {"start": 1, "stop": 2, "when": {"$limit": 3}, "ext": {"ros": {}}}


def test_query_stops_when_callback_returns_false():
    store = ReductRecordStore("http://store:8383", "bucket")
    seen = []
    count = store.query("imu", None, None, lambda r: seen.append(r) and False)
    assert count == 1
    assert len(seen) == 1


def test_store_errors_become_query_errors():
    store = ReductRecordStore("http://store:8383", "nope")
    with pytest.raises(QueryError):
        store.query("imu", None, None, lambda r: True)
    with pytest.raises(QueryError):
        store.list_entries()


def test_invalid_entry_is_query_error():
    store = ReductRecordStore("http://store:8383", "bucket")
    with pytest.raises(QueryError):
        store.query("missing", None, None, lambda r: True)


def test_invalid_expression_string():
    store = ReductRecordStore("http://store:8383", "bucket")
    with pytest.raises(QueryError):
        store.query("imu", None, None, lambda r: True, when="{not json")


def test_list_entries():
    entries = ReductRecordStore("http://store:8383", "bucket").list_entries()
    assert [e.name for e in entries] == ["a", "b"]
    assert entries[0].record_count == 3
    assert entries[0].oldest_record == 1_000
