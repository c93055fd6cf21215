"""
Summary statistics over accumulated collections.

``summarize`` computes per-field min/max/mean in one pass with a running
(Welford) accumulator plus the time range and implied sample rate.
``summarize_scans`` computes per-scan point ranges over a strided sample.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from core.constants import (
    ACCEL_FIELDS,
    SCAN_SAMPLE_POINTS,
    SCAN_SAMPLE_STEP,
)
from core.models import AccelerationSample, ScanRecord
from decoders.points import POINT_FIELDS


@dataclass
class RunningStats:
    """Single-pass mean/variance with O(1) memory; non-finite values are ignored."""
    count: int = 0
    mean: float = 0.0
    m2: float = 0.0
    min_val: float = float('inf')
    max_val: float = float('-inf')

    def update(self, value: float):
        if math.isnan(value) or math.isinf(value):
            return
        self.count += 1
        delta = value - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (value - self.mean)
        self.min_val = min(self.min_val, value)
        self.max_val = max(self.max_val, value)

    @property
    def std(self) -> float:
        if self.count < 2:
            return 0.0
        return math.sqrt(self.m2 / (self.count - 1))

    def to_field_stats(self) -> Optional["FieldStats"]:
        if self.count == 0:
            return None
        return FieldStats(min=self.min_val, max=self.max_val, mean=self.mean, std=self.std)


@dataclass
class FieldStats:
    min: float
    max: float
    mean: float
    std: float = 0.0

    def to_dict(self) -> dict:
        return {
            "min": round(self.min, 6),
            "max": round(self.max, 6),
            "mean": round(self.mean, 6),
            "std": round(self.std, 6),
        }


@dataclass
class SampleStats:
    count: int
    fields: Dict[str, Optional[FieldStats]]
    start_ts: int                         # nanoseconds
    end_ts: int
    duration_seconds: float
    implied_rate_hz: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "fields": {k: v.to_dict() if v else None for k, v in self.fields.items()},
            "start_ts": self.start_ts,
            "end_ts": self.end_ts,
            "duration_seconds": self.duration_seconds,
            "implied_rate_hz": self.implied_rate_hz,
        }


def summarize(
    collection: Sequence[AccelerationSample],
    fields: Sequence[str] = ACCEL_FIELDS,
) -> Optional[SampleStats]:
    """
    Summarize a timestamp-sorted collection. Returns None when it is empty.

    The time range runs from the first to the last sample; the rate is
    only reported when that range is positive.
    """
    if not collection:
        return None

    accumulators = {name: RunningStats() for name in fields}
    for sample in collection:
        for name, acc in accumulators.items():
            acc.update(getattr(sample, name))

    start_ts = collection[0].timestamp_ns
    end_ts = collection[-1].timestamp_ns
    duration = (end_ts - start_ts) / 1e9

    return SampleStats(
        count=len(collection),
        fields={name: acc.to_field_stats() for name, acc in accumulators.items()},
        start_ts=start_ts,
        end_ts=end_ts,
        duration_seconds=duration,
        implied_rate_hz=len(collection) / duration if duration > 0 else None,
    )


# ---------------------------------------------------------------------------
# Point-cloud scans
# ---------------------------------------------------------------------------

@dataclass
class ScanSummary:
    index: int
    rel_time_s: float                     # seconds since the first scan
    total_points: int
    sampled_points: int                   # total_points // sample_step
    valid_points: int                     # sampled points with non-NaN x, y, z
    ranges: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    samples: List[Tuple[int, Tuple[float, ...]]] = field(default_factory=list)


def _points_array(scan: ScanRecord) -> np.ndarray:
    if not scan.points:
        return np.empty((0, len(POINT_FIELDS)), dtype=np.float32)
    return np.array(
        [(p.x, p.y, p.z, p.intensity) for p in scan.points], dtype=np.float32
    )


def summarize_scans(
    scans: Sequence[ScanRecord],
    sample_step: int = SCAN_SAMPLE_STEP,
    max_samples: int = SCAN_SAMPLE_POINTS,
) -> List[ScanSummary]:
    """Every *sample_step*-th point of each scan, NaN points dropped."""
    if not scans:
        return []

    t0 = scans[0].timestamp
    summaries = []
    for i, scan in enumerate(scans):
        points = _points_array(scan)
        # keep the original index of each sampled point for display
        sampled_idx = np.arange(0, len(points), sample_step)
        sampled = points[sampled_idx]
        valid_mask = ~np.isnan(sampled[:, :3]).any(axis=1)
        valid = sampled[valid_mask]
        valid_idx = sampled_idx[valid_mask]

        summary = ScanSummary(
            index=i,
            rel_time_s=(scan.timestamp - t0) / 1e6,
            total_points=len(points),
            sampled_points=len(points) // sample_step,
            valid_points=len(valid),
        )
        if len(valid):
            for col, name in enumerate(POINT_FIELDS):
                summary.ranges[name] = (float(np.nanmin(valid[:, col])), float(np.nanmax(valid[:, col])))
            summary.samples = [
                (int(idx), tuple(float(v) for v in row))
                for idx, row in zip(valid_idx[:max_samples], valid[:max_samples])
            ]
        summaries.append(summary)
    return summaries
