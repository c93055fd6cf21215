"""Store package -- read-only access to the time-series blob store."""
from store.base import Expression, RecordCallback, RecordStore
from store.reduct_store import ReductRecordStore
