import json

import pytest

from extraction.selection import (
    build_selection,
    render,
    ros_topic_extraction,
    sampling_condition,
)
from extraction.verify import parse_predicate


def test_csv_selection_labels_the_filtered_column():
    doc = build_selection("csv", parse_predicate("|accel_x| > 10"))
    assert doc == {
        "select": {
            "csv": {"has_headers": True},
            "columns": [
                {"name": "ts_ns"},
                {"name": "linear_acceleration_x", "as_label": "acc_x"},
                {"name": "linear_acceleration_y"},
                {"name": "linear_acceleration_z"},
            ],
        },
        "when": {"$gt": [{"$abs": ["@acc_x"]}, 10]},
    }


def test_json_selection():
    doc = build_selection("json", parse_predicate("accel_z < -5"))
    assert doc["select"]["json"] == {}
    assert doc["select"]["columns"][3] == {"name": "linear_acceleration_z", "as_label": "acc_z"}
    assert doc["when"] == {"@acc_z": {"$lt": -5}}


def test_selection_without_predicate_has_no_condition():
    doc = build_selection("csv")
    assert "when" not in doc
    assert all("as_label" not in c for c in doc["select"]["columns"])


def test_selection_rejects_unknown_format_and_field():
    with pytest.raises(ValueError):
        build_selection("parquet")
    with pytest.raises(ValueError):
        build_selection("csv", parse_predicate("timestamp_ns > 0"))


def test_ros_and_sampling_documents():
    assert ros_topic_extraction("/imu") == {"ros": {"extract": {"topic": "/imu"}}}
    assert sampling_condition("5s", 4) == {"$each_t": "5s", "$limit": 4}


def test_render_is_compact_json():
    text = render(sampling_condition("5s", 5))
    assert text == '{"$each_t":"5s","$limit":5}'
    assert json.loads(text)["$limit"] == 5
    assert render(None) == ""
