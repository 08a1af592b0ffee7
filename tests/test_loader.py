"""Tests for NDJSON measurement parsing."""

import json
import logging
from datetime import datetime, timezone

import pytest

from vigil.core.loader import load_measurements, parse_lines, parse_measurement


def _line(**overrides):
    obj = {
        "component": "c1",
        "instance": "i1",
        "metric": "MEMORY",
        "timestamp": "2024-01-15T10:00:00+00:00",
        "value": 10,
    }
    obj.update(overrides)
    return json.dumps(obj)


class TestParseMeasurement:
    def test_basic(self):
        m = parse_measurement(_line())
        assert m.component_id == "c1"
        assert m.instance_id == "i1"
        assert m.metric_name == "MEMORY"
        assert m.timestamp == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
        assert m.value == 10.0

    def test_alternate_keys(self):
        m = parse_measurement(json.dumps({
            "component_id": "c1", "instance_id": "i2", "name": "CPU",
            "ts": "2024-01-15T10:00:00Z", "value": "3.5",
        }))
        assert m.instance_id == "i2"
        assert m.metric_name == "CPU"
        assert m.value == 3.5
        assert m.timestamp.tzinfo is not None

    def test_epoch_timestamp(self):
        m = parse_measurement(_line(timestamp=0))
        assert m.timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_naive_timestamp_is_utc(self):
        m = parse_measurement(_line(timestamp="2024-01-15T10:00:00"))
        assert m.timestamp.tzinfo == timezone.utc

    def test_missing_field(self):
        with pytest.raises(ValueError, match="instance_id"):
            parse_measurement(json.dumps({"component": "c1", "metric": "M", "timestamp": 0, "value": 1}))

    def test_invalid_json(self):
        with pytest.raises(ValueError):
            parse_measurement("{not valid json")

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            parse_measurement("[1, 2]")

    def test_bad_value(self):
        with pytest.raises(ValueError):
            parse_measurement(_line(value="lots"))


class TestParseLines:
    def test_skips_blank_and_malformed(self, caplog):
        lines = [_line(), "", "garbage", _line(instance="i2")]
        with caplog.at_level(logging.WARNING, logger="vigil.loader"):
            measurements = parse_lines(lines)
        assert [m.instance_id for m in measurements] == ["i1", "i2"]
        assert "line 3" in caplog.text


class TestLoadMeasurements:
    def test_from_file(self, tmp_path):
        path = tmp_path / "m.ndjson"
        path.write_text(_line() + "\n" + _line(instance="i2", value=91) + "\n")
        measurements = load_measurements(path)
        assert len(measurements) == 2
        assert measurements[1].value == 91.0
