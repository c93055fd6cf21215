"""
Acceleration sample decoders: CSV, JSON rows, and ROS message JSON.

Recovery granularity differs by format:
  - CSV: a bad line is logged and skipped; the rest of the blob decodes.
  - JSON rows / ROS message: any schema problem rejects the whole blob.
"""

import json
import logging
import re
from typing import Any, List

from core.constants import (
    ACCEL_COLUMNS,
    CSV_FIELD_COUNT,
    NANOS_PER_SECOND,
    TIMESTAMP_COLUMN,
)
from core.errors import FieldParseError, SchemaViolation
from core.models import AccelerationSample, StoreRecord
from decoders.base import DecodeResult

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INT_RE = re.compile(r"^[+-]?\d+$")


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def _parse_int64(text: str, line: str) -> int:
    text = text.strip()
    if not _INT_RE.match(text):
        raise FieldParseError(line, f"invalid integer {text!r}")
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise FieldParseError(line, f"integer out of int64 range {text!r}")
    return value


def _parse_float(text: str, line: str) -> float:
    text = text.strip()
    # float() would accept digit separators
    if "_" in text:
        raise FieldParseError(line, f"invalid float {text!r}")
    try:
        return float(text)
    except ValueError:
        raise FieldParseError(line, f"invalid float {text!r}") from None


def parse_csv_line(line: str) -> AccelerationSample:
    """
    Parse ``ts_ns,accel_x,accel_y,accel_z`` into a sample.

    Raises:
        FieldParseError: wrong field count or a non-numeric field.
    """
    parts = line.split(",")
    if len(parts) != CSV_FIELD_COUNT:
        raise FieldParseError(
            line, f"expected {CSV_FIELD_COUNT} fields, got {len(parts)}"
        )
    return AccelerationSample(
        timestamp_ns=_parse_int64(parts[0], line),
        accel_x=_parse_float(parts[1], line),
        accel_y=_parse_float(parts[2], line),
        accel_z=_parse_float(parts[3], line),
    )


class CsvSampleDecoder:
    """CSV blob with a header line; many samples per blob."""

    name = "csv"

    def decode(self, record: StoreRecord) -> DecodeResult:
        result = DecodeResult()
        text = record.blob.decode("utf-8", errors="replace")
        is_header = True

        # split on \n only; other Unicode line breaks stay inside the line
        for line in text.split("\n"):
            line = line.rstrip("\r")
            if not line.strip():
                continue
            if is_header:
                is_header = False
                continue
            try:
                result.items.append(parse_csv_line(line))
            except FieldParseError as e:
                result.skipped_lines += 1
                logger.warning("Skipping CSV line (record ts=%d): %s", record.timestamp, e)

        return result


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------

def _load_json(blob: bytes) -> Any:
    try:
        return json.loads(blob)
    except (ValueError, UnicodeDecodeError) as e:
        raise SchemaViolation(f"invalid JSON: {e}") from e
    except RecursionError:
        raise SchemaViolation("invalid JSON: nesting too deep") from None


def _lookup(obj: Any, path: str) -> Any:
    """Follow a dotted *path* through nested objects."""
    node = obj
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            raise SchemaViolation(f"missing field '{path}'")
        node = node[key]
    return node


def _require_int(obj: Any, path: str) -> int:
    value = _lookup(obj, path)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaViolation(f"field '{path}' must be an integer, got {value!r}")
    if not INT64_MIN <= value <= INT64_MAX:
        raise SchemaViolation(f"field '{path}' out of int64 range")
    return value


def _require_float(obj: Any, path: str) -> float:
    value = _lookup(obj, path)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaViolation(f"field '{path}' must be a number, got {value!r}")
    try:
        return float(value)
    except OverflowError:
        raise SchemaViolation(f"field '{path}' out of float range") from None


# ---------------------------------------------------------------------------
# JSON rows
# ---------------------------------------------------------------------------

def parse_json_rows(blob: bytes) -> List[AccelerationSample]:
    """
    Parse a JSON array of ``{"ts_ns": ..., "linear_acceleration_x": ...}``
    rows. Any bad row rejects the whole blob.
    """
    rows = _load_json(blob)
    if not isinstance(rows, list):
        raise SchemaViolation(f"expected a JSON array, got {type(rows).__name__}")

    samples = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise SchemaViolation(f"row {i} is not an object")
        try:
            values = {f: _require_float(row, col) for f, col in ACCEL_COLUMNS.items()}
            samples.append(AccelerationSample(
                timestamp_ns=_require_int(row, TIMESTAMP_COLUMN), **values
            ))
        except SchemaViolation as e:
            raise SchemaViolation(f"row {i}: {e}") from None
    return samples


class JsonRowDecoder:
    """JSON array blob; many samples per blob."""

    name = "json"

    def decode(self, record: StoreRecord) -> DecodeResult:
        try:
            return DecodeResult(items=parse_json_rows(record.blob))
        except SchemaViolation as e:
            logger.warning("Skipping JSON blob (record ts=%d, %d bytes): %s",
                           record.timestamp, record.size, e)
            return DecodeResult.skip(e)


# ---------------------------------------------------------------------------
# ROS message JSON
# ---------------------------------------------------------------------------

def parse_imu_message(blob: bytes) -> AccelerationSample:
    """Parse one ``sensor_msgs/Imu``-shaped JSON message."""
    msg = _load_json(blob)
    sec = _require_int(msg, "header.stamp.sec")
    nanosec = _require_int(msg, "header.stamp.nanosec")
    timestamp_ns = sec * NANOS_PER_SECOND + nanosec
    if not INT64_MIN <= timestamp_ns <= INT64_MAX:
        raise SchemaViolation("header.stamp out of int64 nanosecond range")
    return AccelerationSample(
        timestamp_ns=timestamp_ns,
        accel_x=_require_float(msg, "linear_acceleration.x"),
        accel_y=_require_float(msg, "linear_acceleration.y"),
        accel_z=_require_float(msg, "linear_acceleration.z"),
    )


class RosMessageDecoder:
    """One JSON-encoded ROS message per blob; exactly one sample."""

    name = "ros"

    def decode(self, record: StoreRecord) -> DecodeResult:
        try:
            return DecodeResult(items=[parse_imu_message(record.blob)])
        except SchemaViolation as e:
            logger.warning("Skipping ROS message (record ts=%d): %s", record.timestamp, e)
            return DecodeResult.skip(e)
