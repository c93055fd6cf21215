"""
Shared data models: dataclasses used across multiple packages.

Sample types produced by the decoders and the record/entry types delivered
by the store live here to avoid circular imports between ``store``,
``decoders`` and ``extraction``.
"""

from dataclasses import dataclass, field
from typing import Dict, List


# ---------------------------------------------------------------------------
# Decoded samples
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AccelerationSample:
    """One IMU reading."""
    timestamp_ns: int         # signed 64-bit nanoseconds since epoch
    accel_x: float
    accel_y: float
    accel_z: float

    def to_dict(self) -> dict:
        return {
            "timestamp_ns": self.timestamp_ns,
            "accel_x": self.accel_x,
            "accel_y": self.accel_y,
            "accel_z": self.accel_z,
        }


@dataclass(frozen=True)
class PointSample:
    """One LiDAR point; values are float32 widened to Python floats."""
    x: float
    y: float
    z: float
    intensity: float


@dataclass
class ScanRecord:
    """All points of one point-cloud record."""
    points: List[PointSample]
    labels: Dict[str, str] = field(default_factory=dict)
    timestamp: int = 0        # store time-point, microseconds


@dataclass
class SavedFrame:
    """An image blob written verbatim to disk."""
    index: int
    path: str
    timestamp: int            # store time-point, microseconds
    size: int
    content_type: str


# ---------------------------------------------------------------------------
# Store records
# ---------------------------------------------------------------------------

@dataclass
class StoreRecord:
    """One timestamped record as delivered by the store."""
    blob: bytes
    timestamp: int            # microseconds since epoch
    content_type: str = "application/octet-stream"
    labels: Dict[str, str] = field(default_factory=dict)
    size: int = -1

    def __post_init__(self):
        if self.size < 0:
            self.size = len(self.blob)


@dataclass
class EntryInfo:
    """Summary of one entry in a bucket."""
    name: str
    size: int
    record_count: int
    oldest_record: int        # microseconds since epoch
    latest_record: int

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "size": self.size,
            "record_count": self.record_count,
            "oldest_record": self.oldest_record,
            "latest_record": self.latest_record,
        }
