"""
ReductStore-backed RecordStore.

Wraps the asynchronous ``reduct-py`` client behind the synchronous
callback interface: every call runs its own event loop with
``asyncio.run`` and invokes the callback from inside the record loop.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from core.errors import QueryError
from core.models import EntryInfo, StoreRecord
from store.base import Expression, RecordCallback

logger = logging.getLogger(__name__)


def _import_client():
    # Lazy import so decoders and tests work without the client installed
    try:
        from reduct import Client, ReductError
    except ImportError:
        raise ImportError(
            "reduct-py library required for store access. "
            "Install with: pip install reduct-py"
        )
    return Client, ReductError


def _as_document(expr: Optional[Expression]) -> Optional[Dict[str, Any]]:
    if expr is None or isinstance(expr, dict):
        return expr
    try:
        return json.loads(expr)
    except ValueError as e:
        raise QueryError(f"Selection expression is not valid JSON: {e}") from e


class ReductRecordStore:
    """
    One bucket on a ReductStore instance.

    Connection parameters are kept; a client session is opened per call,
    so instances hold no sockets between queries.
    """

    def __init__(
        self,
        url: str,
        bucket: str,
        *,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.url = url
        self.bucket = bucket
        self.api_token = api_token
        self.timeout = timeout

    def __repr__(self):
        return f"ReductRecordStore({self.url!r}, bucket={self.bucket!r})"

    def _client(self):
        Client, _ = _import_client()
        kwargs = {"api_token": self.api_token}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return Client(self.url, **kwargs)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------
    def query(
        self,
        entry: str,
        start: Optional[int],
        stop: Optional[int],
        callback: RecordCallback,
        *,
        when: Optional[Expression] = None,
        ext: Optional[Expression] = None,
    ) -> int:
        _, ReductError = _import_client()
        options = {}
        if when is not None:
            options["when"] = _as_document(when)
        if ext is not None:
            options["ext"] = _as_document(ext)

        logger.debug("Querying %s/%s start=%s stop=%s options=%s",
                     self.bucket, entry, start, stop, options)
        try:
            return asyncio.run(self._query(entry, start, stop, callback, options))
        except ReductError as e:
            raise QueryError(f"Query on '{self.bucket}/{entry}' failed: {e}") from e
        except (OSError, asyncio.TimeoutError) as e:
            raise QueryError(f"Store at {self.url} unreachable: {e}") from e

    async def _query(self, entry, start, stop, callback, options) -> int:
        count = 0
        async with self._client() as client:
            bucket = await client.get_bucket(self.bucket)
            async for rec in bucket.query(entry, start=start, stop=stop, **options):
                blob = await rec.read_all()
                count += 1
                record = StoreRecord(
                    blob=blob,
                    timestamp=rec.timestamp,
                    content_type=rec.content_type,
                    labels=dict(rec.labels),
                    size=rec.size,
                )
                if not callback(record):
                    break
        return count

    # ------------------------------------------------------------------
    # Browse
    # ------------------------------------------------------------------
    def list_entries(self) -> List[EntryInfo]:
        _, ReductError = _import_client()
        try:
            return asyncio.run(self._list_entries())
        except ReductError as e:
            raise QueryError(f"Listing entries of '{self.bucket}' failed: {e}") from e
        except (OSError, asyncio.TimeoutError) as e:
            raise QueryError(f"Store at {self.url} unreachable: {e}") from e

    async def _list_entries(self) -> List[EntryInfo]:
        async with self._client() as client:
            bucket = await client.get_bucket(self.bucket)
            entries = await bucket.get_entry_list()
        return [
            EntryInfo(
                name=e.name,
                size=e.size,
                record_count=e.record_count,
                oldest_record=e.oldest_record,
                latest_record=e.latest_record,
            )
            for e in entries
        ]
