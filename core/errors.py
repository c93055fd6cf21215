"""
Error taxonomy for the extraction pipeline.

Parsing and decoding errors are contained where they are detected (one
timestamp, one CSV line, one blob). ``QueryError`` always propagates and
aborts the run. ``VerificationFailed`` is reported, never fatal.
"""


class ExtractionError(Exception):
    """Base class for every error raised by the extractor."""


class MalformedTimestamp(ExtractionError, ValueError):
    """A timestamp string did not match ``YYYY-MM-DDTHH:MM:SS[.ffffff][Z]``."""

    def __init__(self, text: str, reason: str = ""):
        self.text = text
        self.reason = reason
        msg = f"Failed to parse datetime {text!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class FieldParseError(ExtractionError, ValueError):
    """One CSV line could not be parsed into a sample."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"{reason} in line {line!r}")


class SchemaViolation(ExtractionError):
    """A JSON blob is missing required fields or has the wrong shape."""


class QueryError(ExtractionError):
    """The store rejected the query or could not be reached."""


class VerificationFailed(ExtractionError):
    """Accumulated records do not all satisfy the nominal filter predicate."""

    def __init__(self, predicate, violations, checked: int):
        self.predicate = predicate
        self.violations = violations
        self.checked = checked
        super().__init__(
            f"{len(violations)} of {checked} records violate {predicate}"
        )


class ConfigError(ExtractionError):
    """The configuration file or flags are invalid."""
