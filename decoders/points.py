"""
Binary point codec: packed float32 point tuples.

Each point is a fixed 16-byte stride of four native-endian float32 values:

    offset  0   x
    offset  4   y
    offset  8   z
    offset 12   intensity

There is no header or length prefix. A trailing partial stride is dropped.
"""

import logging
from typing import Iterable, List

import numpy as np

from core.models import PointSample, ScanRecord, StoreRecord
from decoders.base import DecodeResult

logger = logging.getLogger(__name__)

POINT_FIELDS = ("x", "y", "z", "intensity")
POINT_STRIDE = 4 * len(POINT_FIELDS)


def decode_point_array(blob: bytes) -> np.ndarray:
    """Return an ``(n, 4)`` float32 view over the whole strides of *blob*."""
    num_points = len(blob) // POINT_STRIDE
    if num_points == 0:
        return np.empty((0, len(POINT_FIELDS)), dtype=np.float32)
    data = np.frombuffer(blob, dtype=np.float32, count=num_points * len(POINT_FIELDS))
    return data.reshape(num_points, len(POINT_FIELDS))


def decode_points(blob: bytes) -> List[PointSample]:
    """Decode *blob* into ``len(blob) // 16`` points."""
    return [
        PointSample(float(x), float(y), float(z), float(i))
        for x, y, z, i in decode_point_array(blob).tolist()
    ]


def encode_points(points: Iterable[PointSample]) -> bytes:
    """Pack *points* back into the 16-byte stride layout."""
    rows = [(p.x, p.y, p.z, p.intensity) for p in points]
    if not rows:
        return b""
    return np.asarray(rows, dtype=np.float32).tobytes()


class ScanDecoder:
    """One point-cloud scan per record, keeping its labels and timestamp."""

    name = "scan"

    def decode(self, record: StoreRecord) -> DecodeResult:
        points = decode_points(record.blob)
        if len(record.blob) % POINT_STRIDE:
            logger.debug("Dropped %d trailing bytes from scan at ts=%d",
                         len(record.blob) % POINT_STRIDE, record.timestamp)
        scan = ScanRecord(points=points, labels=dict(record.labels), timestamp=record.timestamp)
        return DecodeResult(items=[scan])
