"""
Streaming query driver.

Runs one time-ranged query against a RecordStore, decodes every delivered
blob with a single decoder strategy, and accumulates the results. A blob
that fails to decode is counted and logged; only a store failure
(``QueryError``) aborts the query.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from core.constants import PROGRESS_EVERY
from core.models import StoreRecord
from decoders.base import DecodeResult, RecordDecoder
from store.base import Expression, RecordStore

logger = logging.getLogger(__name__)

# Caller hook: return False to stop the query after this record
RecordHook = Callable[[StoreRecord, DecodeResult], bool]


def item_timestamp(item: Any) -> int:
    """Sort key shared by samples (``timestamp_ns``) and scans/frames (``timestamp``)."""
    ts = getattr(item, "timestamp_ns", None)
    return item.timestamp if ts is None else ts


@dataclass
class QueryOutcome:
    """Everything one query produced, in arrival order."""
    entry: str
    items: List[Any] = field(default_factory=list)
    records_seen: int = 0
    accepted_records: int = 0
    skipped_records: int = 0
    skipped_lines: int = 0
    stopped_early: bool = False
    store_count: int = 0          # what the store reported delivering

    def sorted_items(self) -> List[Any]:
        return sorted(self.items, key=item_timestamp)

    def counts(self) -> dict:
        return {
            "records_seen": self.records_seen,
            "accepted_records": self.accepted_records,
            "skipped_records": self.skipped_records,
            "skipped_lines": self.skipped_lines,
            "items": len(self.items),
            "stopped_early": self.stopped_early,
        }


class QueryDriver:
    """
    Binds a store to a decoder strategy.

    Args:
        store: RecordStore to query
        decoder: strategy applied to every record of the query
        max_records: stop after this many records (None = no limit)
        progress_every: log progress each time this many more items accumulate
    """

    def __init__(
        self,
        store: RecordStore,
        decoder: RecordDecoder,
        *,
        max_records: Optional[int] = None,
        progress_every: int = PROGRESS_EVERY,
    ):
        self.store = store
        self.decoder = decoder
        self.max_records = max_records
        self.progress_every = progress_every

    def run(
        self,
        entry: str,
        start: Optional[int] = None,
        stop: Optional[int] = None,
        *,
        when: Optional[Expression] = None,
        ext: Optional[Expression] = None,
        on_record: Optional[RecordHook] = None,
    ) -> QueryOutcome:
        """
        Execute the query and return its outcome.

        Raises:
            QueryError: the store call itself failed.
        """
        outcome = QueryOutcome(entry=entry)
        next_progress = self.progress_every

        def _callback(record: StoreRecord) -> bool:
            nonlocal next_progress
            outcome.records_seen += 1

            result = self.decoder.decode(record)
            outcome.skipped_lines += result.skipped_lines
            if result.ok:
                outcome.accepted_records += 1
                outcome.items.extend(result.items)
            else:
                outcome.skipped_records += 1

            if self.progress_every and len(outcome.items) >= next_progress:
                logger.info("  Processed %d records from %s...", len(outcome.items), entry)
                while next_progress <= len(outcome.items):
                    next_progress += self.progress_every

            if on_record is not None and not on_record(record, result):
                outcome.stopped_early = True
                return False
            if self.max_records is not None and outcome.records_seen >= self.max_records:
                outcome.stopped_early = True
                return False
            return True

        logger.debug("Query %s with decoder=%s", entry, self.decoder.name)
        outcome.store_count = self.store.query(
            entry, start, stop, _callback, when=when, ext=ext
        )

        if outcome.skipped_records or outcome.skipped_lines:
            logger.warning(
                "%s: accepted %d records, skipped %d records and %d lines",
                entry, outcome.accepted_records, outcome.skipped_records, outcome.skipped_lines,
            )
        return outcome
