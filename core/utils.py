"""
Shared utilities: timestamp parsing and formatting.

The store's time representation is an integer count of microseconds since
the Unix epoch (UTC). Everything here converts to or from that form.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.errors import MalformedTimestamp

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# YYYY-MM-DDTHH:MM:SS, then optional .fraction and optional trailing Z.
# Anything after that is ignored; a bare "." with no digits is rejected.
_TIME_RE = re.compile(
    r"^(\d{4})-(\d{1,2})-(\d{1,2})"          # date
    r"T(\d{1,2}):(\d{1,2}):(\d{1,2})"        # time
    r"(?:\.(\d+)|(?![.\d]))"                 # optional fraction
    r"(Z)?"                                  # optional UTC marker
)


def parse_time(text: str) -> Optional[int]:
    """
    Parse an ISO-8601-like UTC timestamp into store microseconds.

    Returns None for an empty string (unbounded range end). The fraction
    is right-padded to six digits and truncated beyond six.

    Examples:
        >>> parse_time("1970-01-01T00:00:01Z")
        1000000
        >>> parse_time("1970-01-01T00:00:01.5")
        1500000
    """
    if not text:
        return None

    match = _TIME_RE.match(text)
    if not match:
        raise MalformedTimestamp(text)

    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    try:
        dt = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError as e:
        raise MalformedTimestamp(text, str(e)) from e

    frac = (match.group(7) or "")[:6].ljust(6, "0")
    micros = (dt - EPOCH) // timedelta(microseconds=1)
    return micros + int(frac)


def format_time(micros: int) -> str:
    """Render store microseconds as ``YYYY-MM-DD HH:MM:SS`` (UTC)."""
    dt = EPOCH + timedelta(microseconds=micros)
    return dt.strftime("%Y-%m-%d %H:%M:%S")
