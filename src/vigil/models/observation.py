"""Frozen dataclass models for measurements and symptoms."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# Joins a prefix (symptom kind, config key) with a metric name
COMPOSITE_SEPARATOR = "_"


def composite_name(prefix: str, name: str) -> str:
    """Join a prefix and a metric name, e.g. ("LOW", "MEMORY") -> "LOW_MEMORY"."""
    return f"{prefix}{COMPOSITE_SEPARATOR}{name}"


def split_composite_name(composite: str) -> tuple[str, str]:
    """Reverse composite_name. The prefix never contains the separator."""
    prefix, sep, name = composite.partition(COMPOSITE_SEPARATOR)
    if not sep:
        return composite, ""
    return prefix, name


@dataclass(frozen=True, slots=True)
class Measurement:
    """One observed metric value for one component instance at one time."""

    component_id: str
    instance_id: str
    metric_name: str
    timestamp: datetime
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    @property
    def key(self) -> tuple[str, str, datetime]:
        """Identity used for merge and lookup."""
        return (self.instance_id, self.metric_name, self.timestamp)


@dataclass(frozen=True, slots=True)
class Symptom:
    """A typed diagnostic fact about an instance, assigned at a checkpoint."""

    symptom_type: str  # composite: kind + "_" + metric name
    instance_id: str
    assigned_at: datetime
    measurements: tuple[Measurement, ...] = ()

    @property
    def kind(self) -> str:
        return split_composite_name(self.symptom_type)[0]

    @property
    def metric_name(self) -> str:
        return split_composite_name(self.symptom_type)[1]
