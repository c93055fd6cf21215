"""
Plain-text rendering of extraction results.

Every function returns a string; the CLI decides where it goes.
"""

from typing import List, Optional, Sequence

from core.constants import ACCEL_COLUMNS, HEAD_ROWS
from core.models import AccelerationSample, EntryInfo
from core.utils import format_time
from extraction.jobs import ExtractionReport
from extraction.stats import SampleStats, ScanSummary
from extraction.verify import VerificationResult


def format_head(samples: Sequence[AccelerationSample], n: int = HEAD_ROWS) -> str:
    rows = min(n, len(samples))
    lines = [
        f"\n=== DataFrame Head (first {rows} rows) ===",
        f"{'ts_ns':>20}" + "".join(f"{c.replace('acceleration', 'accel'):>20}" for c in ACCEL_COLUMNS.values()),
        "-" * 80,
    ]
    for s in samples[:rows]:
        lines.append(f"{s.timestamp_ns:>20}{s.accel_x:>20.6f}{s.accel_y:>20.6f}{s.accel_z:>20.6f}")
    return "\n".join(lines)


def format_stats(stats: Optional[SampleStats]) -> str:
    if stats is None:
        return "\nNo data available for statistics."

    lines = ["\n=== DataFrame Statistics ===", f"Total records: {stats.count}"]
    for name, fs in stats.fields.items():
        label = ACCEL_COLUMNS.get(name, name).replace("acceleration", "accel")
        if fs is None:
            lines.append(f"{label:>20}: no finite values")
            continue
        lines.append(f"{label:>20}: min={fs.min:>10.6f}, max={fs.max:>10.6f}, mean={fs.mean:>10.6f}")

    lines += [
        "\nTime range:",
        f"  Start timestamp: {stats.start_ts} ns",
        f"  End timestamp:   {stats.end_ts} ns",
        f"  Duration:        {stats.duration_seconds:.3f} seconds",
    ]
    if stats.implied_rate_hz is not None:
        lines.append(f"  Sample rate:     {stats.implied_rate_hz:.1f} Hz (approx)")
    return "\n".join(lines)


def format_verification(result: VerificationResult) -> str:
    lines = [
        "\n=== Filter Verification ===",
        f"Filter verification: {'PASSED' if result.passed else 'FAILED'}",
        f"All records have {result.predicate}: {'Yes' if result.passed else 'No'}",
    ]
    if not result.passed:
        lines.append(f"Violations: {len(result.violations)} of {result.checked}")
        for index, item in result.violations[:5]:
            lines.append(f"  [{index}] {item}")
    field = getattr(result.predicate, "field", None)
    if result.value_range is not None:
        lo, hi = result.value_range
        lines.append(f"Filtered {field} range: [{lo:.6f}, {hi:.6f}]")
    if result.abs_range is not None:
        lo, hi = result.abs_range
        lines.append(f"Filtered |{field}| range: [{lo:.6f}, {hi:.6f}]")
    return "\n".join(lines)


def format_counts(report: ExtractionReport) -> str:
    o = report.outcome
    text = (
        f"\n=== Processing Complete ===\n"
        f"Entry: {report.entry}\n"
        f"Records: {o.records_seen} received, {o.accepted_records} accepted, "
        f"{o.skipped_records} skipped\n"
        f"Items extracted: {len(report.items)}"
    )
    if o.skipped_lines:
        text += f"\nLines skipped: {o.skipped_lines}"
    if o.stopped_early:
        text += "\nStopped early at record limit"
    return text


def format_sample_report(report: ExtractionReport) -> str:
    parts = [format_counts(report)]
    if report.items:
        parts += [format_head(report.items), format_stats(report.stats)]
        if report.verification is not None:
            parts.append(format_verification(report.verification))
    else:
        parts.append(f"\nNo records found in {report.entry}.")
    return "\n".join(parts)


def format_scans(summaries: List[ScanSummary], sample_step: int) -> str:
    if not summaries:
        return "No scans retrieved!"

    lines = [
        "\n=== Point Cloud Analysis ===",
        f"Total scans: {len(summaries)}",
        f"Time range: {summaries[0].rel_time_s:.1f}s to {summaries[-1].rel_time_s:.1f}s\n",
    ]
    for s in summaries:
        lines.append(f"Scan {s.index + 1} at t = {s.rel_time_s:.1f}s:")
        lines.append(f"  Total points: {s.total_points}")
        lines.append(f"  Sampled points (every {sample_step}th): {s.sampled_points} total, "
                     f"{s.valid_points} valid (non-NaN)")
        if s.ranges:
            for name in ("x", "y", "z", "intensity"):
                lo, hi = s.ranges[name]
                label = name.capitalize() if name == "intensity" else name.upper()
                lines.append(f"  {label} range: [{lo:.2f}, {hi:.2f}]")
            lines.append("  Sample points:")
            for idx, (x, y, z, i) in s.samples:
                lines.append(f"    Point {idx}: x={x:.2f}, y={y:.2f}, z={z:.2f}, I={i:.2f}")
        lines.append("")
    return "\n".join(lines)


def format_frames(report: ExtractionReport) -> str:
    lines = [format_counts(report)]
    for frame in report.items:
        lines.append(f"Saved {frame.path} | ts={frame.timestamp} | size={frame.size} "
                     f"| content_type={frame.content_type}")
    return "\n".join(lines)


def format_entries(bucket: str, entries: List[EntryInfo]) -> str:
    lines = [f"Entries in bucket '{bucket}':"]
    for e in entries:
        lines.append(
            f"  - {e.name} | size={e.size} | records={e.record_count}"
            f" | oldest={format_time(e.oldest_record)} | latest={format_time(e.latest_record)}"
        )
    return "\n".join(lines)
