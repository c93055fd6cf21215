"""
Image frame sink: writes each record's blob verbatim to disk.

Files are named ``frame_<index>.<ext>`` where the index counts delivered
records and the extension is ``.png`` when the content type mentions png,
``.jpg`` otherwise.
"""

import logging
import os

from core.models import SavedFrame, StoreRecord
from core.utils import format_time
from decoders.base import DecodeResult

logger = logging.getLogger(__name__)


def frame_extension(content_type: str) -> str:
    return ".png" if "png" in content_type else ".jpg"


class FrameWriter:
    """Writes frames into *out_dir*, creating it on first use."""

    name = "frames"

    def __init__(self, out_dir: str):
        self.out_dir = out_dir
        self._next_index = 0

    def decode(self, record: StoreRecord) -> DecodeResult:
        index = self._next_index
        self._next_index += 1
        path = os.path.join(self.out_dir, f"frame_{index}{frame_extension(record.content_type)}")

        try:
            os.makedirs(self.out_dir, exist_ok=True)
            with open(path, "wb") as f:
                f.write(record.blob)
        except OSError as e:
            logger.warning("Could not write %s: %s", path, e)
            return DecodeResult.skip(e)

        logger.info("Saved %s | ts=%s | size=%d | content_type=%s",
                    path, format_time(record.timestamp), record.size, record.content_type)
        return DecodeResult(items=[SavedFrame(
            index=index,
            path=path,
            timestamp=record.timestamp,
            size=record.size,
            content_type=record.content_type,
        )])
