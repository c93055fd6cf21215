"""
Extraction jobs: query → decode → sort → summarize → verify.

One function per use case:
  - browse_entries         list entries of the bucket
  - extract_csv_samples    CSV IMU entry, server filter |accel_x| > 10
  - extract_json_samples   JSON IMU entry, server filter accel_z < -5
  - extract_ros_topic      IMU topic extracted from MCAP records
  - extract_images         sampled image frames written to disk
  - extract_point_clouds   sampled point-cloud scans

All of them return an ``ExtractionReport``; a ``QueryError`` from the store
propagates to the caller unchanged.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from core.constants import (
    CSV_ENTRY,
    CSV_FILTER,
    IMAGE_DIR,
    IMAGE_ENTRY,
    IMU_TOPIC,
    JSON_ENTRY,
    JSON_FILTER,
    MAX_FRAMES,
    MAX_SCANS,
    MCAP_ENTRY,
    POINT_CLOUD_ENTRY,
    PROGRESS_EVERY,
    SAMPLING_INTERVAL,
    SCAN_SAMPLE_STEP,
)
from core.errors import VerificationFailed
from core.models import EntryInfo
from decoders import FrameWriter, ScanDecoder, get_decoder
from decoders.base import RecordDecoder
from extraction.driver import QueryDriver, QueryOutcome
from extraction.selection import (
    build_selection,
    render,
    ros_topic_extraction,
    sampling_condition,
)
from extraction.stats import SampleStats, ScanSummary, summarize, summarize_scans
from extraction.verify import (
    FilterPredicate,
    VerificationResult,
    parse_predicate,
    verify_collection,
)
from store.base import Expression, RecordStore

logger = logging.getLogger(__name__)

PredicateLike = Union[FilterPredicate, str]


@dataclass
class ExtractionReport:
    """Outcome of one job: sorted items plus whatever was derived from them."""
    entry: str
    outcome: QueryOutcome
    items: List[Any] = field(default_factory=list)
    stats: Optional[SampleStats] = None
    verification: Optional[VerificationResult] = None
    scan_summaries: List[ScanSummary] = field(default_factory=list)
    selection: str = ""

    @property
    def verification_error(self) -> Optional[VerificationFailed]:
        if self.verification is None or self.verification.passed:
            return None
        return self.verification.to_error()

    def to_dict(self) -> dict:
        report = {
            "entry": self.entry,
            "selection": self.selection,
            "counts": self.outcome.counts(),
            "stats": self.stats.to_dict() if self.stats else None,
        }
        if self.verification is not None:
            report["verification"] = {
                "predicate": str(self.verification.predicate),
                "passed": self.verification.passed,
                "checked": self.verification.checked,
                "violations": len(self.verification.violations),
            }
        return report


def _as_predicate(predicate: Optional[PredicateLike]) -> Optional[FilterPredicate]:
    if predicate is None or isinstance(predicate, FilterPredicate):
        return predicate
    return parse_predicate(predicate)


def _run(
    store: RecordStore,
    decoder: RecordDecoder,
    entry: str,
    start: Optional[int],
    stop: Optional[int],
    *,
    when: Optional[Expression] = None,
    ext: Optional[Expression] = None,
    max_records: Optional[int] = None,
    progress_every: int = PROGRESS_EVERY,
) -> ExtractionReport:
    selection = ext if ext is not None else when
    if isinstance(selection, dict):
        selection = render(selection)
    logger.info("Querying entry %s (%s)", entry, selection or "no selection")

    driver = QueryDriver(store, decoder, max_records=max_records, progress_every=progress_every)
    outcome = driver.run(entry, start, stop, when=when, ext=ext)

    logger.info("Processing complete: %d items from %d records (%d records skipped)",
                len(outcome.items), outcome.records_seen, outcome.skipped_records)
    return ExtractionReport(
        entry=entry,
        outcome=outcome,
        items=outcome.sorted_items(),
        selection=selection or "",
    )


def _verify(report: ExtractionReport, predicate: Optional[FilterPredicate]):
    if predicate is None:
        return
    report.verification = verify_collection(report.items, predicate)
    error = report.verification_error
    if error is not None:
        first_index, first = report.verification.violations[0]
        logger.warning("Filter verification failed: %s (first at index %d: %r)",
                       error, first_index, first)


# ---------------------------------------------------------------------------
# Acceleration samples
# ---------------------------------------------------------------------------

def extract_samples(
    store: RecordStore,
    entry: str,
    fmt: str,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    *,
    predicate: Optional[PredicateLike] = None,
    server_filter: bool = True,
    ext: Optional[Expression] = None,
    progress_every: int = PROGRESS_EVERY,
) -> ExtractionReport:
    """
    Extract acceleration samples from a CSV, JSON or ROS entry.

    When *predicate* is given it is pushed to the store as a selection
    (unless *server_filter* is False) and always re-checked client-side.
    """
    predicate = _as_predicate(predicate)
    if ext is None and fmt in ("csv", "json"):
        ext = build_selection(fmt, predicate if server_filter else None)

    report = _run(store, get_decoder(fmt), entry, start, stop,
                  ext=ext, progress_every=progress_every)
    report.stats = summarize(report.items)
    _verify(report, predicate)
    return report


def extract_csv_samples(
    store: RecordStore,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    *,
    entry: str = CSV_ENTRY,
    predicate: Optional[PredicateLike] = CSV_FILTER,
    **kwargs,
) -> ExtractionReport:
    return extract_samples(store, entry, "csv", start, stop, predicate=predicate, **kwargs)


def extract_json_samples(
    store: RecordStore,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    *,
    entry: str = JSON_ENTRY,
    predicate: Optional[PredicateLike] = JSON_FILTER,
    **kwargs,
) -> ExtractionReport:
    return extract_samples(store, entry, "json", start, stop, predicate=predicate, **kwargs)


def extract_ros_topic(
    store: RecordStore,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    *,
    entry: str = MCAP_ENTRY,
    topic: str = IMU_TOPIC,
    progress_every: int = PROGRESS_EVERY,
) -> ExtractionReport:
    """IMU messages of *topic*, extracted server-side from MCAP records as JSON."""
    return extract_samples(store, entry, "ros", start, stop,
                           ext=ros_topic_extraction(topic), progress_every=progress_every)


# ---------------------------------------------------------------------------
# Images and point clouds
# ---------------------------------------------------------------------------

def extract_images(
    store: RecordStore,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    *,
    entry: str = IMAGE_ENTRY,
    out_dir: str = IMAGE_DIR,
    max_frames: int = MAX_FRAMES,
    interval: str = SAMPLING_INTERVAL,
) -> ExtractionReport:
    """Write one frame per *interval* (at most *max_frames*) into *out_dir*."""
    return _run(store, FrameWriter(out_dir), entry, start, stop,
                when=sampling_condition(interval, max_frames), max_records=max_frames)


def extract_point_clouds(
    store: RecordStore,
    start: Optional[int] = None,
    stop: Optional[int] = None,
    *,
    entry: str = POINT_CLOUD_ENTRY,
    max_scans: int = MAX_SCANS,
    interval: str = SAMPLING_INTERVAL,
    sample_step: int = SCAN_SAMPLE_STEP,
) -> ExtractionReport:
    """Fetch up to *max_scans* scans, one per *interval*, and summarize them."""
    report = _run(store, ScanDecoder(), entry, start, stop,
                  when=sampling_condition(interval, max_scans), max_records=max_scans)
    for scan in report.items:
        logger.info("Loaded scan: %d points, timestamp: %d", len(scan.points), scan.timestamp)
    report.scan_summaries = summarize_scans(report.items, sample_step=sample_step)
    return report


def browse_entries(store: RecordStore) -> List[EntryInfo]:
    """List the entries of the store's bucket."""
    entries = store.list_entries()
    logger.info("Found %d entries", len(entries))
    return entries
