"""Extraction package -- query driver, verification, statistics and jobs."""
from extraction.driver import QueryDriver, QueryOutcome
from extraction.jobs import (
    ExtractionReport,
    browse_entries,
    extract_csv_samples,
    extract_images,
    extract_json_samples,
    extract_point_clouds,
    extract_ros_topic,
    extract_samples,
)
from extraction.selection import build_selection, ros_topic_extraction, sampling_condition
from extraction.stats import SampleStats, ScanSummary, summarize, summarize_scans
from extraction.verify import (
    FilterPredicate,
    VerificationResult,
    find_violations,
    parse_predicate,
    verify,
    verify_collection,
)
