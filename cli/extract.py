"""
CLI entry point for the sensor record extractor.

Usage:
  python -m cli.extract browse
  python -m cli.extract csv --filter "|accel_x| > 10" --start 2025-01-01T00:00:00Z
  python -m cli.extract json --filter "accel_z < -5"
  python -m cli.extract ros --topic /vectornav/IMU_restamped
  python -m cli.extract images --max-frames 5 --output-dir img
  python -m cli.extract pointcloud --max-scans 4

Exit status: 0 ok, 1 query/config/input error, 2 filter verification failed.
"""

import argparse
import json
import logging
import sys

from core.config import load_config
from core.constants import (
    CSV_ENTRY,
    CSV_FILTER,
    IMAGE_ENTRY,
    IMU_TOPIC,
    JSON_ENTRY,
    JSON_FILTER,
    MAX_FRAMES,
    MAX_SCANS,
    MCAP_ENTRY,
    POINT_CLOUD_ENTRY,
    SAMPLING_INTERVAL,
    SCAN_SAMPLE_STEP,
)
from core.errors import ConfigError, MalformedTimestamp, QueryError
from core.utils import parse_time
from extraction.jobs import (
    browse_entries,
    extract_csv_samples,
    extract_images,
    extract_json_samples,
    extract_point_clouds,
    extract_ros_topic,
)
from extraction.verify import parse_predicate
from reporting.console import (
    format_entries,
    format_frames,
    format_sample_report,
    format_scans,
)
from store.reduct_store import ReductRecordStore

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", "-c", default=None, help="Path to extractor YAML config")
    common.add_argument("--url", default=None, help="Store URL")
    common.add_argument("--bucket", "-b", default=None, help="Bucket name")
    common.add_argument("--token", default=None, help="API token (default: $REDUCT_API_TOKEN)")
    common.add_argument("--timeout", type=float, default=None, help="Client timeout in seconds")
    common.add_argument("--start", default=None, help="Range start, YYYY-MM-DDTHH:MM:SS[.ffffff][Z]")
    common.add_argument("--stop", default=None, help="Range end (empty = unbounded)")
    common.add_argument("--report", default=None, help="Write a JSON report to this path")
    common.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    parser = argparse.ArgumentParser(
        prog="cli.extract",
        description="Extract, decode and verify sensor records from a time-series blob store",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("browse", parents=[common], help="List entries in the bucket")

    for name, entry, default_filter in (("csv", CSV_ENTRY, CSV_FILTER),
                                        ("json", JSON_ENTRY, JSON_FILTER)):
        p = sub.add_parser(name, parents=[common], help=f"Filtered {name.upper()} IMU extraction")
        p.add_argument("--entry", default=entry)
        p.add_argument("--filter", default=default_filter,
                       help=f"Predicate, e.g. '{default_filter}' (default: %(default)s)")
        p.add_argument("--no-server-filter", action="store_true",
                       help="Fetch unfiltered and only verify client-side")

    p = sub.add_parser("ros", parents=[common], help="IMU topic extraction from MCAP records")
    p.add_argument("--entry", default=MCAP_ENTRY)
    p.add_argument("--topic", default=IMU_TOPIC)

    p = sub.add_parser("images", parents=[common], help="Save sampled image frames")
    p.add_argument("--entry", default=IMAGE_ENTRY)
    p.add_argument("--output-dir", "-o", default=None, help="Frame directory (default: img)")
    p.add_argument("--max-frames", type=int, default=MAX_FRAMES)
    p.add_argument("--interval", default=SAMPLING_INTERVAL)

    p = sub.add_parser("pointcloud", parents=[common], help="Sampled point-cloud scan analysis")
    p.add_argument("--entry", default=POINT_CLOUD_ENTRY)
    p.add_argument("--max-scans", type=int, default=MAX_SCANS)
    p.add_argument("--interval", default=SAMPLING_INTERVAL)
    p.add_argument("--sample-step", type=int, default=SCAN_SAMPLE_STEP)

    return parser


def _write_report(path: str, data) -> None:
    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)
    print(f"\nReport saved to: {path}")


def run(args, store, config, start, stop) -> int:
    """Dispatch one sub-command; QueryError propagates."""
    if args.command == "browse":
        entries = browse_entries(store)
        print(format_entries(config.bucket, entries))
        if args.report:
            _write_report(args.report, [e.to_dict() for e in entries])
        return EXIT_OK

    if args.command in ("csv", "json"):
        extract = extract_csv_samples if args.command == "csv" else extract_json_samples
        print(f"Entry: {args.entry}\nFilter: {args.filter}\n")
        report = extract(
            store, start, stop,
            entry=args.entry,
            predicate=args.filter,
            server_filter=not args.no_server_filter,
            progress_every=config.progress_every,
        )
        print(format_sample_report(report))
    elif args.command == "ros":
        print(f"Entry: {args.entry}\nTopic: {args.topic}\n")
        report = extract_ros_topic(store, start, stop, entry=args.entry, topic=args.topic,
                                   progress_every=config.progress_every)
        print(format_sample_report(report))
    elif args.command == "images":
        report = extract_images(store, start, stop,
                                entry=args.entry,
                                out_dir=args.output_dir or config.output_dir,
                                max_frames=args.max_frames,
                                interval=args.interval)
        print(format_frames(report))
    else:
        print(f"Fetching {args.max_scans} point cloud scans...")
        report = extract_point_clouds(store, start, stop,
                                      entry=args.entry,
                                      max_scans=args.max_scans,
                                      interval=args.interval,
                                      sample_step=args.sample_step)
        print(format_scans(report.scan_summaries, args.sample_step))
        if not report.items:
            return EXIT_ERROR

    if args.report:
        _write_report(args.report, report.to_dict())
    if report.verification_error is not None:
        return EXIT_VERIFICATION_FAILED
    return EXIT_OK


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config).override(
            url=args.url,
            bucket=args.bucket,
            api_token=args.token,
            timeout=args.timeout,
            start=args.start,
            stop=args.stop,
        )
        start = parse_time(config.start)
        stop = parse_time(config.stop)
        if getattr(args, "filter", None) is not None:
            args.filter = parse_predicate(args.filter)
    except (ConfigError, MalformedTimestamp, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    store = ReductRecordStore(config.url, config.bucket,
                              api_token=config.api_token, timeout=config.timeout)
    try:
        return run(args, store, config, start, stop)
    except QueryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
