"""
Decoder protocol and the per-blob result type.

A decoder never lets a parse error escape: it returns a ``DecodeResult``
carrying the decoded items plus whatever was skipped. Line-level
recoveries are counted in ``skipped_lines``; a rejected blob carries the
reason in ``error``.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol

from core.models import StoreRecord


@dataclass
class DecodeResult:
    items: List[Any] = field(default_factory=list)
    skipped_lines: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def skip(cls, error: Exception) -> "DecodeResult":
        return cls(error=error)


class RecordDecoder(Protocol):
    """Turns one store record into zero or more typed items."""

    name: str

    def decode(self, record: StoreRecord) -> DecodeResult:
        ...
