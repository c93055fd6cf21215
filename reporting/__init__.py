"""Reporting package -- plain-text rendering of extraction reports."""
from reporting.console import (
    format_counts,
    format_entries,
    format_frames,
    format_head,
    format_sample_report,
    format_scans,
    format_stats,
    format_verification,
)
