"""
Selection expressions: server-side projection, filtering and sampling.

The store is the only party that interprets these documents; this module
only fills templates. The predicate field is exported as a label (via
``as_label``) so the ``when`` condition can reference it as ``@alias``.
"""

import json
from typing import Any, Dict, List, Optional

from core.constants import ACCEL_COLUMNS, LABEL_ALIASES, TIMESTAMP_COLUMN
from extraction.verify import FilterPredicate


def _columns(labelled_field: Optional[str]) -> List[Dict[str, str]]:
    columns = [{"name": TIMESTAMP_COLUMN}]
    for sample_field, column in ACCEL_COLUMNS.items():
        col = {"name": column}
        if sample_field == labelled_field:
            col["as_label"] = LABEL_ALIASES[sample_field]
        columns.append(col)
    return columns


def build_selection(fmt: str, predicate: Optional[FilterPredicate] = None) -> Dict[str, Any]:
    """
    Build the ``ext`` document for a CSV or JSON acceleration entry.

    >>> build_selection("json", FilterPredicate("accel_z", "<", -5))["when"]
    {'@acc_z': {'$lt': -5}}
    """
    if fmt == "csv":
        reader = {"csv": {"has_headers": True}}
    elif fmt == "json":
        reader = {"json": {}}
    else:
        raise ValueError(f"No selection template for format {fmt!r}")

    labelled = predicate.field if predicate is not None else None
    if labelled is not None and labelled not in LABEL_ALIASES:
        raise ValueError(f"Cannot filter server-side on field {labelled!r}")

    doc: Dict[str, Any] = {"select": dict(reader, columns=_columns(labelled))}
    if predicate is not None:
        doc["when"] = predicate.to_when(LABEL_ALIASES[labelled])
    return doc


def ros_topic_extraction(topic: str) -> Dict[str, Any]:
    """``ext`` document extracting one topic from MCAP records as JSON."""
    return {"ros": {"extract": {"topic": topic}}}


def sampling_condition(interval: str, limit: int) -> Dict[str, Any]:
    """``when`` condition keeping one record per *interval*, at most *limit*."""
    return {"$each_t": interval, "$limit": limit}


def render(doc: Optional[Dict[str, Any]]) -> str:
    """Serialize a document the way it is logged and reported."""
    return json.dumps(doc, separators=(",", ":")) if doc is not None else ""
