"""Decoders package -- per-format strategies that turn blobs into typed items."""
from decoders.base import DecodeResult, RecordDecoder
from decoders.frames import FrameWriter, frame_extension
from decoders.points import (
    POINT_STRIDE,
    ScanDecoder,
    decode_point_array,
    decode_points,
    encode_points,
)
from decoders.samples import (
    CsvSampleDecoder,
    JsonRowDecoder,
    RosMessageDecoder,
    parse_csv_line,
    parse_imu_message,
    parse_json_rows,
)

# Format name -> decoder class; the strategy is picked once per query
DECODERS = {
    "csv": CsvSampleDecoder,
    "json": JsonRowDecoder,
    "ros": RosMessageDecoder,
    "scan": ScanDecoder,
}


def get_decoder(fmt: str) -> RecordDecoder:
    try:
        return DECODERS[fmt]()
    except KeyError:
        raise ValueError(f"Unknown record format: {fmt!r}") from None
