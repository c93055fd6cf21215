"""
RecordStore protocol: the read-only view of the time-series blob store.

Implementations must invoke *callback* once per record in delivery order
and stop requesting records as soon as it returns False. Transport or
query failures are raised as ``QueryError``.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol, Union

from core.models import EntryInfo, StoreRecord

# Opaque server-side document: a dict, or an already-serialized JSON string
Expression = Union[Dict[str, Any], str]

RecordCallback = Callable[[StoreRecord], bool]


class RecordStore(Protocol):

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
        """Stream records of *entry* in ``[start, stop)``; return how many were delivered."""
        ...

    def list_entries(self) -> List[EntryInfo]:
        ...
