"""
Core package: shared constants, errors, utilities, config and data models.

This is the foundation layer with no local dependencies.
"""

from core.errors import (
    ConfigError,
    ExtractionError,
    FieldParseError,
    MalformedTimestamp,
    QueryError,
    SchemaViolation,
    VerificationFailed,
)
from core.models import (
    AccelerationSample,
    EntryInfo,
    PointSample,
    SavedFrame,
    ScanRecord,
    StoreRecord,
)
from core.utils import format_time, parse_time
