import logging

import pytest

from conftest import csv_record, imu_row, json_record
from core.errors import FieldParseError, SchemaViolation
from core.models import AccelerationSample, StoreRecord
from decoders import (
    DECODERS,
    CsvSampleDecoder,
    JsonRowDecoder,
    RosMessageDecoder,
    frame_extension,
    get_decoder,
    parse_csv_line,
)

HEADER = "ts_ns,linear_acceleration_x,linear_acceleration_y,linear_acceleration_z"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def test_csv_single_valid_line():
    result = CsvSampleDecoder().decode(csv_record(f"{HEADER}\n1000,1.5,-2.5,3.5\n"))
    assert result.ok
    assert result.items == [AccelerationSample(1000, 1.5, -2.5, 3.5)]
    assert result.skipped_lines == 0


def test_csv_malformed_line_is_logged_and_skipped(caplog):
    with caplog.at_level(logging.WARNING, logger="decoders.samples"):
        result = CsvSampleDecoder().decode(csv_record(f"{HEADER}\n1000,abc,-2.5,3.5\n"))
    assert result.items == []
    assert result.skipped_lines == 1
    assert result.ok
    assert len(caplog.records) == 1
    assert "1000,abc,-2.5,3.5" in caplog.text


def test_csv_bad_line_does_not_abort_the_rest():
    text = f"{HEADER}\n1,1.0,2.0,3.0\nbroken\n2,4.0,5.0,6.0\n"
    result = CsvSampleDecoder().decode(csv_record(text))
    assert [s.timestamp_ns for s in result.items] == [1, 2]
    assert result.skipped_lines == 1


def test_csv_header_is_first_non_empty_line():
    text = f"\n\n{HEADER}\r\n\r\n7,0.1,0.2,0.3\r\n"
    result = CsvSampleDecoder().decode(csv_record(text))
    assert result.items == [AccelerationSample(7, 0.1, 0.2, 0.3)]


def test_csv_splits_on_newline_only():
    # form feed is not a line break; the line stays whole and is skipped once
    text = f"{HEADER}\n1,2,3\x0c4,5\n2,0,0,0\n"
    result = CsvSampleDecoder().decode(csv_record(text))
    assert [s.timestamp_ns for s in result.items] == [2]
    assert result.skipped_lines == 1


def test_csv_header_only():
    result = CsvSampleDecoder().decode(csv_record(HEADER))
    assert result.items == []
    assert result.skipped_lines == 0


@pytest.mark.parametrize("line", [
    "1000,1.5,-2.5",            # too few fields
    "1000,1.5,-2.5,3.5,9",      # too many fields
    "1.5,1.5,-2.5,3.5",         # non-integer timestamp
    "1_000,1.5,-2.5,3.5",       # digit separators
    "1000,,-2.5,3.5",           # empty float
    "99999999999999999999,1,2,3",  # beyond int64
])
def test_parse_csv_line_rejects(line):
    with pytest.raises(FieldParseError):
        parse_csv_line(line)


def test_parse_csv_line_tolerates_spaces_and_negative_timestamps():
    assert parse_csv_line(" -5 , 1e2 ,-0.5, 3") == AccelerationSample(-5, 100.0, -0.5, 3.0)


# ---------------------------------------------------------------------------
# JSON rows
# ---------------------------------------------------------------------------

def test_json_rows():
    rows = [imu_row(2, 0.0, 1.0, -6.0), imu_row(1, 1, 2, -7)]
    result = JsonRowDecoder().decode(json_record(rows))
    assert result.ok
    assert result.items == [
        AccelerationSample(2, 0.0, 1.0, -6.0),
        AccelerationSample(1, 1.0, 2.0, -7.0),
    ]
    assert isinstance(result.items[1].accel_x, float)


@pytest.mark.parametrize("payload", [
    [{"ts_ns": 1, "linear_acceleration_x": 1.0, "linear_acceleration_y": 2.0}],
    [imu_row("1", 1.0, 2.0, 3.0)],
    [imu_row(1.5, 1.0, 2.0, 3.0)],
    [imu_row(1, "x", 2.0, 3.0)],
    [imu_row(1, True, 2.0, 3.0)],
    {"ts_ns": 1},
    [1, 2, 3],
])
def test_json_schema_violation_rejects_whole_blob(payload, caplog):
    rows = [imu_row(0, 1.0, 1.0, 1.0), payload] if isinstance(payload, list) else payload
    with caplog.at_level(logging.WARNING, logger="decoders.samples"):
        result = JsonRowDecoder().decode(json_record(rows))
    assert not result.ok
    assert isinstance(result.error, SchemaViolation)
    assert result.items == []
    assert "Skipping JSON blob" in caplog.text


def test_json_invalid_document():
    record = StoreRecord(blob=b"[{not json", timestamp=5)
    result = JsonRowDecoder().decode(record)
    assert isinstance(result.error, SchemaViolation)


@pytest.mark.parametrize("row", [
    imu_row(10 ** 400, 1.0, 2.0, 3.0),     # timestamp beyond int64
    imu_row(2 ** 63, 1.0, 2.0, 3.0),
    imu_row(-(2 ** 63) - 1, 1.0, 2.0, 3.0),
    imu_row(1, 10 ** 400, 2.0, 3.0),       # too large for a float
])
def test_json_out_of_range_numbers_reject_blob(row):
    result = JsonRowDecoder().decode(json_record([imu_row(0, 1.0, 1.0, 1.0), row]))
    assert isinstance(result.error, SchemaViolation)
    assert result.items == []


def test_json_int64_bounds_are_accepted():
    rows = [imu_row(2 ** 63 - 1, 0.0, 0.0, 0.0), imu_row(-(2 ** 63), 0.0, 0.0, 0.0)]
    result = JsonRowDecoder().decode(json_record(rows))
    assert [s.timestamp_ns for s in result.items] == [2 ** 63 - 1, -(2 ** 63)]


def test_json_deeply_nested_document():
    result = JsonRowDecoder().decode(StoreRecord(blob=b"[" * 200_000, timestamp=1))
    assert isinstance(result.error, SchemaViolation)


def test_json_empty_array():
    result = JsonRowDecoder().decode(json_record([]))
    assert result.ok
    assert result.items == []


# ---------------------------------------------------------------------------
# ROS message
# ---------------------------------------------------------------------------

def _imu_msg(sec, nanosec, x, y, z):
    return {
        "header": {"stamp": {"sec": sec, "nanosec": nanosec}, "frame_id": "imu"},
        "linear_acceleration": {"x": x, "y": y, "z": z},
        "angular_velocity": {"x": 0.0, "y": 0.0, "z": 0.0},
    }


def test_ros_message_timestamp_reconstruction():
    result = RosMessageDecoder().decode(json_record(_imu_msg(1_700_000_000, 250, 0.1, 0.2, 9.81)))
    assert result.ok
    assert result.items == [AccelerationSample(1_700_000_000_000_000_250, 0.1, 0.2, 9.81)]


def test_ros_message_missing_nested_field():
    msg = _imu_msg(1, 2, 0.0, 0.0, 0.0)
    del msg["header"]["stamp"]["nanosec"]
    result = RosMessageDecoder().decode(json_record(msg))
    assert isinstance(result.error, SchemaViolation)
    assert "header.stamp.nanosec" in str(result.error)


@pytest.mark.parametrize("sec,nanosec", [
    (10 ** 400, 0),
    (2 ** 62, 0),           # fits int64 but sec * 1e9 does not
    (0, 2 ** 64),
])
def test_ros_message_timestamp_out_of_range(sec, nanosec):
    result = RosMessageDecoder().decode(json_record(_imu_msg(sec, nanosec, 0.0, 0.0, 0.0)))
    assert isinstance(result.error, SchemaViolation)


def test_ros_message_huge_acceleration():
    result = RosMessageDecoder().decode(json_record(_imu_msg(1, 0, 10 ** 400, 0.0, 0.0)))
    assert isinstance(result.error, SchemaViolation)
    assert "linear_acceleration.x" in str(result.error)


def test_ros_message_deeply_nested_document():
    result = RosMessageDecoder().decode(StoreRecord(blob=b"[" * 200_000, timestamp=1))
    assert isinstance(result.error, SchemaViolation)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_registry():
    assert set(DECODERS) == {"csv", "json", "ros", "scan"}
    assert isinstance(get_decoder("json"), JsonRowDecoder)
    with pytest.raises(ValueError):
        get_decoder("parquet")


@pytest.mark.parametrize("content_type,ext", [
    ("image/png", ".png"),
    ("image/jpeg", ".jpg"),
    ("application/octet-stream", ".jpg"),
])
def test_frame_extension(content_type, ext):
    assert frame_extension(content_type) == ext
