"""Newline-delimited JSON measurement parsing."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from vigil.models.observation import Measurement

logger = logging.getLogger("vigil.loader")

# Accepted spellings for each Measurement field
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "component_id": ("component", "component_id"),
    "instance_id": ("instance", "instance_id"),
    "metric_name": ("metric", "metric_name", "name"),
    "timestamp": ("timestamp", "ts", "time"),
    "value": ("value",),
}


def _get(obj: dict, field_name: str):
    for key in _FIELD_KEYS[field_name]:
        if key in obj:
            return obj[key]
    raise KeyError(field_name)


def _parse_timestamp(raw) -> datetime:
    """ISO 8601 string or epoch seconds; naive values are taken as UTC."""
    if isinstance(raw, bool):
        raise ValueError(f"Invalid timestamp: {raw!r}")
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    ts = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def parse_measurement(line: str) -> Measurement:
    """Parse one JSON object into a Measurement.

    Raises ValueError for malformed JSON, missing fields or bad values.
    """
    try:
        obj = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc.msg}") from exc
    if not isinstance(obj, dict):
        raise ValueError("Expected a JSON object")

    try:
        return Measurement(
            component_id=str(_get(obj, "component_id")),
            instance_id=str(_get(obj, "instance_id")),
            metric_name=str(_get(obj, "metric_name")),
            timestamp=_parse_timestamp(_get(obj, "timestamp")),
            value=float(_get(obj, "value")),
        )
    except KeyError as exc:
        raise ValueError(f"Missing field: {exc.args[0]}") from exc
    except (TypeError, OverflowError) as exc:
        raise ValueError(str(exc)) from exc


def parse_lines(lines) -> list[Measurement]:
    """Parse an iterable of lines, skipping blank and malformed ones."""
    measurements = []
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            measurements.append(parse_measurement(stripped))
        except ValueError as exc:
            logger.warning("Skipping line %d: %s", lineno, exc)
    return measurements


def load_measurements(path: Path) -> list[Measurement]:
    """Read all measurements from an NDJSON file."""
    with open(path, encoding="utf-8", errors="replace") as f:
        measurements = parse_lines(f)
    logger.debug("Loaded %d measurements from %s", len(measurements), path)
    return measurements
