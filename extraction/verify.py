"""
Post-filter verification: client-side re-check of the nominal predicate.

Server-side selection works on labels and casts, so its results can drift
from the exact predicate. The checks here are authoritative: a record
either satisfies the predicate exactly or is reported as a violation.
"""

import operator
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from core.errors import VerificationFailed

_OPERATORS: Dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}

# Server-side condition operator for each comparison
_WHEN_OPERATORS = {
    ">": "$gt",
    "<": "$lt",
    ">=": "$gte",
    "<=": "$lte",
    "==": "$eq",
    "!=": "$ne",
}

# "|accel_x| > 10", "accel_z < -5", "accel_y >= 1.5e-3"
_PREDICATE_RE = re.compile(
    r"^\s*(\|)?\s*([A-Za-z_]\w*)\s*(\|)?\s*"
    r"(>=|<=|==|!=|>|<)\s*"
    r"([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*$"
)


@dataclass(frozen=True)
class FilterPredicate:
    """``[|]field[|] op threshold`` evaluated against one record attribute."""
    field: str
    op: str
    threshold: float
    absolute: bool = False

    def __post_init__(self):
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op!r}")
        object.__setattr__(self, "threshold", float(self.threshold))

    def value(self, item: Any) -> float:
        val = getattr(item, self.field)
        return abs(val) if self.absolute else val

    def __call__(self, item: Any) -> bool:
        return _OPERATORS[self.op](self.value(item), self.threshold)

    def __str__(self):
        name = f"|{self.field}|" if self.absolute else self.field
        return f"{name} {self.op} {self.threshold:g}"

    def to_when(self, label: str) -> Dict[str, Any]:
        """Render the equivalent server-side condition on ``@label``."""
        ref = f"@{label}"
        op = _WHEN_OPERATORS[self.op]
        threshold = int(self.threshold) if self.threshold.is_integer() else self.threshold
        if self.absolute:
            return {op: [{"$abs": [ref]}, threshold]}
        return {ref: {op: threshold}}


def parse_predicate(text: str) -> FilterPredicate:
    """
    Parse the textual predicate form.

    Examples:
        >>> parse_predicate("|accel_x| > 10")
        FilterPredicate(field='accel_x', op='>', threshold=10.0, absolute=True)
        >>> str(parse_predicate("accel_z < -5"))
        'accel_z < -5'
    """
    match = _PREDICATE_RE.match(text)
    if not match:
        raise ValueError(f"Cannot parse filter predicate: {text!r}")
    left_bar, name, right_bar, op, threshold = match.groups()
    if bool(left_bar) != bool(right_bar):
        raise ValueError(f"Unbalanced '|' in filter predicate: {text!r}")
    return FilterPredicate(name, op, float(threshold), absolute=bool(left_bar))


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def find_violations(
    collection: Iterable[Any],
    predicate: Callable[[Any], bool],
    limit: Optional[int] = None,
) -> List[Tuple[int, Any]]:
    """Return ``(index, item)`` for items failing *predicate*, up to *limit*."""
    violations = []
    for i, item in enumerate(collection):
        if not predicate(item):
            violations.append((i, item))
            if limit is not None and len(violations) >= limit:
                break
    return violations


def verify(collection: Iterable[Any], predicate: Callable[[Any], bool]) -> bool:
    """True iff every item in *collection* satisfies *predicate*."""
    return all(predicate(item) for item in collection)


@dataclass
class VerificationResult:
    predicate: Any
    checked: int
    violations: List[Tuple[int, Any]] = field(default_factory=list)
    value_range: Optional[Tuple[float, float]] = None       # raw field values
    abs_range: Optional[Tuple[float, float]] = None         # |field| for absolute predicates

    @property
    def passed(self) -> bool:
        return not self.violations

    def to_error(self) -> VerificationFailed:
        return VerificationFailed(self.predicate, self.violations, self.checked)

    def raise_for_failure(self):
        if not self.passed:
            raise self.to_error()


def verify_collection(
    collection: Sequence[Any],
    predicate: Callable[[Any], bool],
) -> VerificationResult:
    """Check every item and record the observed range of the predicate field."""
    result = VerificationResult(
        predicate=predicate,
        checked=len(collection),
        violations=find_violations(collection, predicate),
    )
    if isinstance(predicate, FilterPredicate) and collection:
        raw = [getattr(item, predicate.field) for item in collection]
        result.value_range = (min(raw), max(raw))
        if predicate.absolute:
            absolute = [abs(v) for v in raw]
            result.abs_range = (min(absolute), max(absolute))
    return result
